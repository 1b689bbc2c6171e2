"""VocabCards - topic flashcards with local progress tracking"""

__version__ = "1.0.0"
__author__ = "VocabCards Team"

from .config import Config, SettingsManager
from .models import ProgressRecord, Topic, TopicMeta, VocabEntry, VocabType
from .services import Catalog, ProgressStore, export_backup, import_backup
from .session import FlashcardSession
from .app import AppContext

__all__ = [
    'AppContext',
    'Catalog',
    'Config',
    'FlashcardSession',
    'ProgressRecord',
    'ProgressStore',
    'SettingsManager',
    'Topic',
    'TopicMeta',
    'VocabEntry',
    'VocabType',
    'export_backup',
    'import_backup',
]
