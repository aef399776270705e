"""
User settings for Hunter Tab Maker.

Stored as JSON in ~/.tabmaker/settings.json, grouped by category.
Values found in the file are merged over the defaults, so settings added
in newer versions always have a value.
"""
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from tabmaker.constants import HISTORY_LIMIT, INITIAL_COLUMNS, FALLBACK_EXPORT_NAME

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    "general": {
        "undo_limit": HISTORY_LIMIT,
        "initial_columns": INITIAL_COLUMNS,
        "auto_save_enabled": True,
    },
    "export": {
        "fallback_name": FALLBACK_EXPORT_NAME,
    },
    "midi": {
        "bpm": 120,
        "steps_per_beat": 2,
        "velocity": 96,
    },
}


def default_settings_path() -> Path:
    return Path.home() / ".tabmaker" / "settings.json"


class Settings:
    """Settings loaded from a JSON file, with defaults for anything missing."""

    def __init__(self, path: Optional[Path] = None, values: Optional[Dict[str, Dict[str, Any]]] = None):
        """
        Args:
            path: Settings file (default ~/.tabmaker/settings.json)
            values: Initial values merged over the defaults (not read from disk)
        """
        self.path = Path(path) if path is not None else default_settings_path()
        self.values = copy.deepcopy(DEFAULT_SETTINGS)
        if values:
            self._merge(values)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        """
        Load settings from file.

        A missing or unreadable file leaves the defaults in place.
        """
        settings = cls(path)
        if not settings.path.exists():
            return settings

        try:
            with open(settings.path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load settings from %s: %s", settings.path, e)
            return settings

        if isinstance(loaded, dict):
            settings._merge(loaded)
        else:
            logger.warning("Ignoring settings file %s: not a JSON object", settings.path)
        return settings

    def save(self):
        """Save settings to file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self.values, f, indent=2)
        except OSError as e:
            raise IOError(f"Failed to save settings to {self.path}: {e}") from e

    def _merge(self, loaded: Dict[str, Any]):
        # Merge with defaults (in case new settings added)
        for category, entries in loaded.items():
            if isinstance(entries, dict):
                self.values.setdefault(category, {}).update(entries)

    def get(self, category: str, key: str, default: Any = None) -> Any:
        return self.values.get(category, {}).get(key, default)

    def set(self, category: str, key: str, value: Any):
        self.values.setdefault(category, {})[key] = value

    @property
    def undo_limit(self) -> int:
        return int(self.get("general", "undo_limit", HISTORY_LIMIT))

    @property
    def initial_columns(self) -> int:
        return int(self.get("general", "initial_columns", INITIAL_COLUMNS))

    @property
    def auto_save_enabled(self) -> bool:
        return bool(self.get("general", "auto_save_enabled", True))

    @property
    def fallback_name(self) -> str:
        return str(self.get("export", "fallback_name", FALLBACK_EXPORT_NAME))
