"""Narrative variant pools, one JSON list per beat.

  presets/narrative/<beat>.json   shipped variants
  data/narrative/<beat>.json      user variants, appended after the presets

A variant record is {"text": ..., "tags": [...], "environment_tags": [...]};
a bare string is shorthand for an untagged variant.
"""

import logging
from typing import Any

from pydantic import ValidationError

from bending_arena.models import BEATS, NarrativeVariant

from .core import narrative_dir, preset_narrative_dir, read_json

logger = logging.getLogger(__name__)


def _variants(records: list[Any], source: str) -> list[NarrativeVariant]:
    variants = []
    for record in records:
        if isinstance(record, str):
            record = {"text": record}
        try:
            variants.append(NarrativeVariant.model_validate(record))
        except ValidationError as e:
            logger.warning("Skipping invalid variant in %s: %s", source, e)
    return variants


def get_pool(beat: str) -> list[NarrativeVariant]:
    """Variants for one beat. [] for an unknown beat or missing files."""
    if beat not in BEATS:
        return []
    filename = f"{beat}.json"
    pool = _variants(read_json(preset_narrative_dir() / filename, []), f"presets/{filename}")
    pool += _variants(read_json(narrative_dir() / filename, []), f"data/{filename}")
    return pool


def load_pools() -> dict[str, list[NarrativeVariant]]:
    """Every beat's pool, loaded once per battle."""
    return {beat: get_pool(beat) for beat in BEATS}
