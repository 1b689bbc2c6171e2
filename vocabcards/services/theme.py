"""Dark/light theme preference, sharing the progress storage backend."""

import logging
from typing import TYPE_CHECKING

from ..config import Config
from ..errors import StorageUnavailable

if TYPE_CHECKING:
    from .storage import BaseStorage

logger = logging.getLogger(__name__)

DARK = "dark"
LIGHT = "light"


class ThemeStore:
    """Persisted as the string "dark" or "light"; anything else means the default."""

    def __init__(self, storage: "BaseStorage", storage_key: str = Config.THEME_STORAGE_KEY):
        self.storage = storage
        self.storage_key = storage_key
        self.dark_mode: bool = self._load()

    def _load(self) -> bool:
        try:
            value = self.storage.get_item(self.storage_key)
        except StorageUnavailable as e:
            logger.warning("Using default theme: %s", e)
            value = None
        if value == DARK:
            return True
        if value == LIGHT:
            return False
        return Config.DEFAULT_THEME == DARK

    @property
    def name(self) -> str:
        return DARK if self.dark_mode else LIGHT

    def set_dark(self, dark: bool) -> None:
        self.dark_mode = bool(dark)
        try:
            self.storage.set_item(self.storage_key, self.name)
        except StorageUnavailable as e:
            logger.warning("Could not persist theme: %s", e)

    def toggle(self) -> bool:
        self.set_dark(not self.dark_mode)
        return self.dark_mode
