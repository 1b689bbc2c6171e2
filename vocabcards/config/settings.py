"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

# Load .env file if python-dotenv is available
try:
    from dotenv import load_dotenv
    # Load from project root
    _env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(_env_path)
except ImportError:
    pass  # python-dotenv not installed, use environment variables directly


@dataclass
class Config:
    """Application-wide configuration."""

    # Storage keys (one entry per persisted unit)
    KNOWN_STORAGE_KEY: str = "easy-vocab-words-known"
    LEARN_STORAGE_KEY: str = "easy-vocab-words-to-learn"
    THEME_STORAGE_KEY: str = "easy-vocab-theme"
    DEFAULT_THEME: str = os.environ.get("VOCAB_DEFAULT_THEME", "light")

    # topicKey used for persisted records that carry no topic at all
    IMPORTED_TOPIC_KEY: str = "imported"
    TYPE_META_FILE: str = "_meta.json"
    BACKUP_FILE_PREFIX: str = "easy-vocab-backup"

    # Speech
    VOICE: str = os.environ.get("VOCAB_VOICE", "en-US-AriaNeural")
    DEFAULT_RATE: float = 0.9
    SLOW_RATE: float = 0.65
    PAUSE_BETWEEN_REPEAT_MS: int = 400

    # Images
    WIKIPEDIA_API_URL: str = "https://en.wikipedia.org/w/api.php"
    FALLBACK_IMAGE_URL: str = "https://picsum.photos/seed/{seed}/400/300"
    IMAGE_THUMB_SIZE: int = 400
    IMAGE_TIMEOUT: int = 15

    # Cross-platform paths using pathlib
    # BASE_DIR is the project root (parent of vocabcards/)
    BASE_DIR: Path = Path(__file__).parent.parent.parent.resolve()

    DATA_DIR: str = os.environ.get("VOCAB_DATA_DIR", str(BASE_DIR / "data" / "vocab"))
    STORAGE_FILE: str = os.environ.get("VOCAB_STORAGE_FILE", str(BASE_DIR / "data" / "storage.json"))
    MEDIA_DIR: str = os.environ.get("VOCAB_MEDIA_DIR", str(BASE_DIR / "data" / "media"))
    SETTINGS_FILE: str = str(BASE_DIR / "settings.json")
