"""
Storage Pattern - Abstract key-value persistence layer.

Progress stores and the theme persist through this interface, one string
value per key, the same way a browser keeps them in local storage. Enables
switching between an in-memory backend (tests, no persistence) and a JSON
file on disk without changing the stores.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from ..config import Config
from ..errors import StorageUnavailable
from ..utils.helpers import atomic_write_text

logger = logging.getLogger(__name__)


class BaseStorage(ABC):
    """
    Abstract base class for key-value storage backends.

    Implementations raise StorageUnavailable when the backing medium cannot
    be read or written; callers decide how to degrade.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string, or None when the key is absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a string value under key."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key if present."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys."""
        pass


class MemoryStorage(BaseStorage):
    """Process-local storage; nothing survives the session."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items.keys())


class JsonFileStorage(BaseStorage):
    """
    Single JSON file mapping keys to string values.

    Every write rewrites the whole file through a temp file and rename, so
    the file on disk is never ahead of, nor half of, the in-memory state.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Initialize file storage.

        Args:
            path: Path to the JSON file (defaults to Config.STORAGE_FILE)
        """
        self.path = Path(path or Config.STORAGE_FILE)
        self._lock = Lock()
        self._items: Optional[Dict[str, str]] = None

    def _read(self) -> Dict[str, str]:
        if self._items is not None:
            return self._items

        if not self.path.exists():
            self._items = {}
            return self._items

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageUnavailable(str(self.path), f"Could not read storage: {e}") from e

        if not isinstance(data, dict):
            raise StorageUnavailable(str(self.path), "Storage file is not a JSON object")

        self._items = {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}
        return self._items

    def _write(self, items: Dict[str, str]) -> None:
        try:
            atomic_write_text(self.path, json.dumps(items, indent=2, ensure_ascii=False, sort_keys=True))
        except OSError as e:
            raise StorageUnavailable(str(self.path), f"Could not write storage: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            try:
                items = dict(self._read())
            except StorageUnavailable:
                # An unreadable file is replaced by the current state
                logger.warning("Overwriting unreadable storage file %s", self.path)
                items = {}
            items[key] = value
            self._write(items)
            self._items = items

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = dict(self._read())
            if key in items:
                del items[key]
                self._write(items)
                self._items = items

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._read().keys())
