"""Services layer: catalog, progress stores, views and backups."""

from .storage import BaseStorage, JsonFileStorage, MemoryStorage
from .catalog import Catalog, iter_dataset_directory
from .progress_store import ProgressStore, migrate_record
from .theme import ThemeStore
from .transfer import (
    BackupDocument,
    ImportResult,
    LegacyLearnList,
    decode_backup,
    export_backup,
    import_backup,
)

__all__ = [
    "BaseStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "Catalog",
    "iter_dataset_directory",
    "ProgressStore",
    "migrate_record",
    "ThemeStore",
    "BackupDocument",
    "ImportResult",
    "LegacyLearnList",
    "decode_backup",
    "export_backup",
    "import_backup",
]
