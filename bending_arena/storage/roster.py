"""Moves, fighter templates, environments and the bias table (merged presets + user data).

Each kind lives in one JSON file holding a list of records keyed by "id":
  presets/<kind>.json   shipped, read-only
  data/<kind>.json      user additions and overrides (user wins on id collision)

The bias table is a single {character_id: {field: value}} object; user
entries replace preset entries per character.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bending_arena.ai.bias import load_bias_table
from bending_arena.models import AiBias, Environment, FighterTemplate, Move

from .core import data_dir, presets_dir, read_json

logger = logging.getLogger(__name__)


def _merged_records(filename: str) -> list[dict[str, Any]]:
    by_id: dict[str, dict[str, Any]] = {}
    # Presets first (lower priority)
    for record in read_json(presets_dir() / filename, []):
        by_id[record["id"]] = record
    # User records override
    for record in read_json(data_dir() / filename, []):
        by_id[record["id"]] = record
    return list(by_id.values())


def _load(filename: str, model):
    items = []
    for record in _merged_records(filename):
        try:
            items.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping invalid record %r in %s: %s", record.get("id"), filename, e)
    return items


def _find(items, item_id: str):
    for item in items:
        if item.id == item_id:
            return item
    return None


# ── Moves ────────────────────────────────────────────────


def list_moves() -> list[Move]:
    return _load("moves.json", Move)


def get_move(move_id: str) -> Move | None:
    return _find(list_moves(), move_id)


def move_table() -> dict[str, Move]:
    return {m.id: m for m in list_moves()}


# ── Fighters ─────────────────────────────────────────────


def list_fighters() -> list[FighterTemplate]:
    return _load("fighters.json", FighterTemplate)


def get_fighter(fighter_id: str) -> FighterTemplate | None:
    return _find(list_fighters(), fighter_id)


def save_fighter(template: FighterTemplate) -> FighterTemplate:
    """Write a fighter to user data, replacing any user copy with the same id."""
    path: Path = data_dir() / "fighters.json"
    records = [r for r in read_json(path, []) if r["id"] != template.id]
    records.append(template.model_dump())
    path.write_text(json.dumps(records, indent=2))
    return template


def delete_fighter(fighter_id: str) -> bool:
    """Remove a user fighter. A preset with the same id becomes visible again."""
    path: Path = data_dir() / "fighters.json"
    records = read_json(path, [])
    kept = [r for r in records if r["id"] != fighter_id]
    if len(kept) == len(records):
        return False
    path.write_text(json.dumps(kept, indent=2))
    return True


# ── Environments ─────────────────────────────────────────


def list_environments() -> list[Environment]:
    return _load("environments.json", Environment)


def get_environment(environment_id: str) -> Environment | None:
    return _find(list_environments(), environment_id)


# ── Bias table ───────────────────────────────────────────


def get_bias_table() -> dict[str, AiBias]:
    raw: dict[str, Any] = dict(read_json(presets_dir() / "bias.json", {}))
    raw.update(read_json(data_dir() / "bias.json", {}))
    return load_bias_table(raw)
