"""Runtime settings: defaults, a JSON settings file and VOCAB_* environment overrides."""

import copy
import json
import logging
import os
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

# Load .env file if python-dotenv is available
try:
    from dotenv import load_dotenv
    _env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(_env_path)
except ImportError:
    pass

from .settings import Config

logger = logging.getLogger(__name__)

ENV_PREFIX = "VOCAB_"

# Accepted range for speech rate multipliers
RATE_BOUNDS = (0.25, 2.0)


class SettingsManager:
    """
    Layered settings for the flashcard app.

    Resolution order, lowest to highest: ``DEFAULTS``, the settings file,
    ``VOCAB_<KEY>`` environment variables. Only ``set`` and ``reset`` write
    the file; loading never does.

    Usage:
        settings = SettingsManager()
        settings.data_dir              # Path of the dataset tree
        settings.set("SLOW_RATE", 0.6)
    """

    _instance: Optional["SettingsManager"] = None
    _lock: Lock = Lock()

    DEFAULTS: Dict[str, Any] = {
        # Where datasets, progress and speech clips live
        "DATA_DIR": Config.DATA_DIR,
        "STORAGE_FILE": Config.STORAGE_FILE,
        "MEDIA_DIR": Config.MEDIA_DIR,

        # Pronunciation
        "VOICE": Config.VOICE,
        "DEFAULT_RATE": Config.DEFAULT_RATE,
        "SLOW_RATE": Config.SLOW_RATE,
        "PAUSE_BETWEEN_REPEAT_MS": Config.PAUSE_BETWEEN_REPEAT_MS,

        # Word images
        "IMAGE_TIMEOUT": Config.IMAGE_TIMEOUT,

        "LOG_LEVEL": "WARNING",
    }

    def __new__(cls, settings_file: Optional[str] = None) -> "SettingsManager":
        """Singleton: every caller shares the first instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._initialized = False
                    cls._instance = instance
        return cls._instance

    def __init__(self, settings_file: Optional[str] = None) -> None:
        """
        Args:
            settings_file: JSON settings path; Config.SETTINGS_FILE when omitted.
                           Ignored once the singleton exists.
        """
        if getattr(self, "_initialized", False):
            return

        self._settings_file = Path(settings_file or Config.SETTINGS_FILE)
        self._values: Dict[str, Any] = {}
        self._write_lock = Lock()
        self.reload()
        self._initialized = True

    # ---- Loading ----

    def reload(self) -> None:
        """Rebuild values from defaults, the file and the environment."""
        values = dict(self.DEFAULTS)
        values.update(self._read_file())
        values.update(self._read_env())
        self._values = values
        self._check_rates()

    def _read_file(self) -> Dict[str, Any]:
        if not self._settings_file.exists():
            return {}
        try:
            with open(self._settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring settings file %s: %s", self._settings_file, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self._settings_file)
            return {}
        return data

    def _read_env(self) -> Dict[str, Any]:
        found = {}
        for key, default in self.DEFAULTS.items():
            raw = os.environ.get(ENV_PREFIX + key)
            if raw is not None:
                found[key] = self._coerce(raw, default)
        return found

    @staticmethod
    def _coerce(raw: str, default: Any) -> Any:
        """Convert an environment string to the default's type; keep the default if it fails."""
        if isinstance(default, bool):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        for kind in (int, float):
            if isinstance(default, kind):
                try:
                    return kind(raw)
                except ValueError:
                    logger.warning("Ignoring non-numeric value %r", raw)
                    return default
        return raw

    def _check_rates(self) -> None:
        low, high = RATE_BOUNDS
        for key in ("DEFAULT_RATE", "SLOW_RATE"):
            value = self._values.get(key)
            if not isinstance(value, (int, float)) or not low <= value <= high:
                logger.warning("%s=%r out of range %s-%s, using default", key, value, low, high)
                self._values[key] = self.DEFAULTS[key]

    # ---- Access ----

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    @property
    def data_dir(self) -> Path:
        return Path(self._values["DATA_DIR"])

    @property
    def storage_file(self) -> Path:
        return Path(self._values["STORAGE_FILE"])

    @property
    def media_dir(self) -> Path:
        return Path(self._values["MEDIA_DIR"])

    def speech_options(self) -> Dict[str, Any]:
        """Keyword arguments for SpeechService."""
        return {
            "voice": self._values["VOICE"],
            "default_rate": self._values["DEFAULT_RATE"],
            "slow_rate": self._values["SLOW_RATE"],
            "pause_ms": self._values["PAUSE_BETWEEN_REPEAT_MS"],
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Value for key; containers are returned as copies."""
        value = self._values.get(key, default)
        return copy.deepcopy(value) if isinstance(value, (dict, list)) else value

    def get_all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._values)

    # ---- Mutation ----

    def set(self, key: str, value: Any, persist: bool = True) -> None:
        self._values[key] = value
        if persist:
            self._save()

    def reset(self, key: Optional[str] = None) -> None:
        """Restore one key, or all of them, to DEFAULTS and save."""
        if key is None:
            self._values = dict(self.DEFAULTS)
        elif key in self.DEFAULTS:
            self._values[key] = self.DEFAULTS[key]
        self._save()

    def _save(self) -> None:
        with self._write_lock:
            try:
                self._settings_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self._settings_file, "w", encoding="utf-8") as f:
                    json.dump(self._values, f, indent=2, ensure_ascii=False)
            except OSError as e:
                logger.warning("Could not save settings file %s: %s", self._settings_file, e)

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton so the next construction reloads (tests)."""
        with cls._lock:
            cls._instance = None
