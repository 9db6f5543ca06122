"""Configuration management for Tonal Karaoke components.

Each section lives in its own JSON file in the configuration directory
(``capture.json``, ``pitch.json``, ``playback.json``). Missing files are
written with the defaults, so users have something to edit.
"""

from typing import Dict, Any, Optional
import copy
import json
import os
from pathlib import Path

from ..logger import get_logger
from ..note_utils import parse_note_name
from .errors import InvalidInputError

logger = get_logger(__name__)

# Overrides the default ~/.config/tonal_karaoke
CONFIG_DIR_ENV = "TONAL_KARAOKE_CONFIG_DIR"

DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "capture": {
        "sample_rate": 44100,
        "frames": 2048,
        "silence_threshold": 0.1,
        "input_gain": 2.0,
        "device_id": None,
    },
    "pitch": {
        "low_note": "C2",
        "high_note": "A5",  # Exclusive
    },
    "playback": {
        "poll_timeout_ms": 10,
    },
}


def default_config_dir() -> Path:
    env_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return Path(os.path.expanduser("~")) / ".config" / "tonal_karaoke"


class ConfigManager:
    """Loads, saves and checks the configuration sections."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        self.config_dir = Path(config_dir) if config_dir is not None else default_config_dir()
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.default_configs = copy.deepcopy(DEFAULT_CONFIGS)
        self.configs = {
            name: self.load_config(name, defaults)
            for name, defaults in self.default_configs.items()
        }

    @property
    def default_log_file(self) -> Path:
        return self.config_dir / "tonal_karaoke.log"

    def _section_file(self, name: str) -> Path:
        return self.config_dir / f"{name}.json"

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Read a section, filling in defaults for any keys the file lacks.

        An unreadable file is reported and replaced by the defaults in memory;
        the file itself is left alone so the user can fix it.
        """
        config_file = self._section_file(name)
        if not config_file.exists():
            config = dict(default_config)
            self.save_config(name, config)
            return config

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError("top level is not an object")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration from {config_file}: {e}")
            return dict(default_config)

        unknown = sorted(set(stored) - set(default_config))
        if unknown:
            logger.warning(f"Ignoring unknown keys in {config_file}: {', '.join(unknown)}")
        logger.info(f"Loaded configuration from {config_file}")
        return {key: stored.get(key, value) for key, value in default_config.items()}

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Write a section; failures are logged, not raised."""
        config_file = self._section_file(name)
        try:
            with open(config_file, "w", encoding="utf-8") as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False
        logger.info(f"Saved configuration to {config_file}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get a copy of a configuration section by name."""
        return dict(self.configs.get(name, {}))

    def validate(self) -> None:
        """Check the values a session depends on.

        Raises:
            InvalidInputError: Naming the first offending setting
        """
        capture = self.configs["capture"]
        for key in ("sample_rate", "frames"):
            value = capture[key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidInputError(f"capture.{key} must be a positive integer, got {value!r}")
        if not isinstance(capture["silence_threshold"], (int, float)) or not (
            0.0 <= capture["silence_threshold"] < 1.0
        ):
            raise InvalidInputError(
                f"capture.silence_threshold must be in [0, 1), got {capture['silence_threshold']!r}"
            )
        if not isinstance(capture["input_gain"], (int, float)) or capture["input_gain"] <= 0:
            raise InvalidInputError(
                f"capture.input_gain must be positive, got {capture['input_gain']!r}"
            )
        device_id = capture["device_id"]
        if device_id is not None and (isinstance(device_id, bool) or not isinstance(device_id, int)):
            raise InvalidInputError(f"capture.device_id must be an integer or null, got {device_id!r}")

        timeout = self.configs["playback"]["poll_timeout_ms"]
        if not isinstance(timeout, (int, float)) or timeout < 0:
            raise InvalidInputError(f"playback.poll_timeout_ms must not be negative, got {timeout!r}")

        pitch = self.configs["pitch"]
        for key in ("low_note", "high_note"):
            if not isinstance(pitch[key], str):
                raise InvalidInputError(f"pitch.{key} must be a note name, got {pitch[key]!r}")
            parse_note_name(pitch[key])
