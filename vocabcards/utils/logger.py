"""Logging setup shared by the CLI and library entry points."""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str = "vocabcards", level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Configure and return the package logger.

    Safe to call repeatedly: the stream handler is attached only once.

    Args:
        name: Logger name (package root by default)
        level: Level name or number; WARNING when omitted
    """
    logger = logging.getLogger(name)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logger.setLevel(level if level is not None else logging.WARNING)

    if not any(getattr(h, "_vocabcards", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._vocabcards = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
