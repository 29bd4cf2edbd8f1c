"""
Player settings for Whack-a-Mole.

Handles the starting level, player name, audio volumes and vibration.
Settings are persisted to ~/.whackamole/settings.json unless another
path is given. One instance is created by the application entry point
and handed to whoever needs it.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from whackamole.utils.constants import DEFAULT_PLAYER_NAME

logger = logging.getLogger(__name__)

APP_DIR = Path.home() / ".whackamole"


class Settings(QObject):
    """Key-value settings store with JSON file persistence.

    Signals:
        changed(str, object): Emitted with (key, new value) after a write.
    """

    changed = pyqtSignal(str, object)

    _defaults = {
        "starting_level": 1,
        "player_name": DEFAULT_PLAYER_NAME,
        "music_volume": 0.5,
        "sfx_volume": 0.5,
        "vibration_enabled": True,
    }

    def __init__(self, path: Optional[Path] = None, parent=None):
        super().__init__(parent)
        self.path = Path(path) if path else APP_DIR / "settings.json"
        self._settings: dict = {}
        self._load()

    @classmethod
    def defaults(cls) -> dict:
        return dict(cls._defaults)

    def _load(self):
        """Load settings from disk, merging with defaults."""
        self._settings = dict(self._defaults)
        if not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                saved = json.load(f)
        except (ValueError, OSError) as e:
            logger.warning(f"Could not read settings from {self.path}, using defaults: {e}")
            return
        if not isinstance(saved, dict):
            logger.warning(f"Ignoring malformed settings file {self.path}")
            return
        self._settings.update(saved)

    def save(self):
        """Persist current settings to disk. Failures are logged, not raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save settings to {self.path}: {e}")

    def get(self, key: str, default=None):
        """Get a setting value."""
        if default is None:
            default = self._defaults.get(key)
        return self._settings.get(key, default)

    def set(self, key: str, value):
        """Set a setting value, save, and notify subscribers."""
        self._settings[key] = value
        self.save()
        self.changed.emit(key, value)

    # =========================================================================
    # Typed accessors (fall back to defaults on bad values)
    # =========================================================================

    @property
    def starting_level(self) -> int:
        try:
            level = int(self.get("starting_level"))
        except (TypeError, ValueError):
            return self._defaults["starting_level"]
        return level if level >= 1 else self._defaults["starting_level"]

    def set_starting_level(self, level: int):
        self.set("starting_level", int(level))

    @property
    def player_name(self) -> str:
        name = self.get("player_name")
        if not isinstance(name, str) or not name.strip():
            return self._defaults["player_name"]
        return name.strip()

    def set_player_name(self, name: str):
        self.set("player_name", name)

    @property
    def music_volume(self) -> float:
        return self._volume("music_volume")

    def set_music_volume(self, volume: float):
        self.set("music_volume", _clamp_volume(volume))

    @property
    def sfx_volume(self) -> float:
        return self._volume("sfx_volume")

    def set_sfx_volume(self, volume: float):
        self.set("sfx_volume", _clamp_volume(volume))

    @property
    def vibration_enabled(self) -> bool:
        value = self.get("vibration_enabled")
        if not isinstance(value, bool):
            return self._defaults["vibration_enabled"]
        return value

    def set_vibration_enabled(self, enabled: bool):
        self.set("vibration_enabled", bool(enabled))

    def _volume(self, key: str) -> float:
        try:
            return _clamp_volume(float(self.get(key)))
        except (TypeError, ValueError):
            return self._defaults[key]


def _clamp_volume(volume: float) -> float:
    return max(0.0, min(1.0, float(volume)))
