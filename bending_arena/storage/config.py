"""Battle configuration (turn limits, tie rules, conclusion templates)."""

import json
from pathlib import Path
from typing import Any

from .core import data_dir

DEFAULT_OUTCOME_TEMPLATES: dict[str, str] = {
    "victory": "{{winner.name}} stands victorious over {{loser.name}} after {{turns}} turns.",
    "forfeit": "{{loser.name}} can fight no longer and yields. {{winner.name}} wins.",
    "timeout": "With more health remaining, {{winner.name}} is declared the victor.",
    "draw": "After {{turns}} turns the battle ends in a draw.",
    "stalemate": "After {{turns}} turns neither fighter can break through. Stalemate.",
    "aborted": "The battle at {{environment.name}} was cut short.",
}

_CONFIG_DEFAULTS: dict[str, Any] = {
    "max_turns": 50,
    "stalemate_turns": 20,
    "forfeit_on_exhaustion": False,
    "decide_on_timeout": False,
    "seed": None,
    "outcome_templates": DEFAULT_OUTCOME_TEMPLATES,
}

_SCALAR_KEYS = ("max_turns", "stalemate_turns", "forfeit_on_exhaustion", "decide_on_timeout", "seed")


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = {key: _CONFIG_DEFAULTS[key] for key in _SCALAR_KEYS}
    config["outcome_templates"] = dict(_CONFIG_DEFAULTS["outcome_templates"])
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        for key in _SCALAR_KEYS:
            if key in stored:
                config[key] = stored[key]
        if isinstance(stored.get("outcome_templates"), dict):
            config["outcome_templates"].update(stored["outcome_templates"])
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config."""
    config = get_config()
    for key in _SCALAR_KEYS:
        if key in fields:
            config[key] = fields[key]
    if "outcome_templates" in fields:
        config["outcome_templates"].update(fields["outcome_templates"])
    _config_path().write_text(json.dumps(config, indent=2))
    return config
