"""
Application context - the composition root.

Builds the catalog once, then the storage and both progress stores (with
the catalog injected for legacy-key migration), and hands the same
instances to every layer that needs them.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import Config, SettingsManager
from .fetchers import ImageResolver, SpeechService, WikipediaImageFetcher
from .services import (
    BaseStorage,
    Catalog,
    ImportResult,
    JsonFileStorage,
    ProgressStore,
    ThemeStore,
    export_backup,
    import_backup,
)
from .session import FlashcardSession

logger = logging.getLogger(__name__)


class AppContext:
    """
    One instance per session holding the catalog and learner state.

    Usage:
        ctx = AppContext.from_settings()
        ctx.session.set_topic("oxford-3000/animals")
        ctx.session.mark_known()
    """

    def __init__(
        self,
        catalog: Catalog,
        storage: BaseStorage,
        media_dir: Optional[str] = None,
        settings: Optional[SettingsManager] = None,
    ):
        self.catalog = catalog
        self.storage = storage
        self.media_dir = media_dir
        self.settings = settings
        self.known = ProgressStore(storage, Config.KNOWN_STORAGE_KEY, catalog)
        self.learn = ProgressStore(storage, Config.LEARN_STORAGE_KEY, catalog)
        self.theme = ThemeStore(storage)
        self.session = FlashcardSession(catalog, self.known, self.learn)
        self._speech: Optional[SpeechService] = None
        self._images: Optional[ImageResolver] = None
        logger.debug(
            "Context ready: %d topics, %d known, %d to learn",
            len(catalog), self.known.count, self.learn.count,
        )

    @classmethod
    def from_paths(
        cls,
        data_dir: Union[str, Path],
        storage_file: Union[str, Path],
        media_dir: Optional[str] = None,
    ) -> "AppContext":
        return cls(
            catalog=Catalog.from_directory(data_dir),
            storage=JsonFileStorage(str(storage_file)),
            media_dir=media_dir,
        )

    @classmethod
    def from_settings(cls, settings: Optional[SettingsManager] = None) -> "AppContext":
        settings = settings or SettingsManager()
        ctx = cls.from_paths(settings.data_dir, settings.storage_file, str(settings.media_dir))
        ctx.settings = settings
        return ctx

    # ---- Collaborators (created on first use) ----

    @property
    def speech(self) -> SpeechService:
        if self._speech is None:
            options = self.settings.speech_options() if self.settings is not None else {}
            self._speech = SpeechService(media_dir=self.media_dir, **options)
        return self._speech

    @property
    def images(self) -> ImageResolver:
        if self._images is None:
            timeout = self.settings.get("IMAGE_TIMEOUT", Config.IMAGE_TIMEOUT) if self.settings is not None else Config.IMAGE_TIMEOUT
            fetcher = WikipediaImageFetcher(timeout=timeout)
            self._images = ImageResolver(fetcher)
        return self._images

    # ---- Backups ----

    def export_progress(self) -> str:
        return export_backup(self.learn, self.known)

    def import_progress(self, text: str) -> ImportResult:
        return import_backup(text, self.learn, self.known, self.catalog)

    async def close(self) -> None:
        if self._images is not None:
            await self._images.close()
