"""Storage initialization, path helpers, and slug utilities."""

import json
import re
import unicodedata
from pathlib import Path
from typing import Any

_data_dir: Path | None = None
_presets_dir: Path | None = None


def slugify(title: str) -> str:
    """Convert a display name to a filesystem-safe id.

    "Fire Nation Capital" → "fire-nation-capital"
    """
    text = unicodedata.normalize("NFKD", title)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"['\"]", "", text)  # strip apostrophes/quotes before hyphenation
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text or "untitled"


def init_storage(data_dir: Path, presets_dir: Path | None = None) -> None:
    global _data_dir, _presets_dir

    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)
    narrative_dir().mkdir(exist_ok=True)
    if presets_dir is None:
        # Default: repo_root/presets
        presets_dir = Path(__file__).parent.parent.parent / "presets"
    _presets_dir = presets_dir


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def presets_dir() -> Path:
    assert _presets_dir is not None, "Call init_storage() before using storage"
    return _presets_dir


def narrative_dir() -> Path:
    return data_dir() / "narrative"


def preset_narrative_dir() -> Path:
    return presets_dir() / "narrative"


def read_json(path: Path, default: Any = None) -> Any:
    """Parse a JSON file, or return `default` if it does not exist."""
    if not path.is_file():
        return default
    return json.loads(path.read_text())
