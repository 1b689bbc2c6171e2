"""Utils module."""

from .helpers import (
    atomic_write_text,
    ensure_dir,
    utc_now_iso,
)
from .parsing import TextParser
from .paths import MediaPathGenerator
from .logger import setup_logger

__all__ = [
    'atomic_write_text',
    'ensure_dir',
    'utc_now_iso',
    'TextParser',
    'MediaPathGenerator',
    'setup_logger'
]
