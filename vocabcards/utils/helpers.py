"""Utility functions."""

import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Union


def ensure_dir(path: Union[str, Path]) -> None:
    """Ensure directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def atomic_write_text(path: Union[str, Path], text: str) -> None:
    """
    Write text through a temp file and rename it over the target.

    Raises OSError on failure; the temp file is removed either way.
    """
    target = Path(path)
    ensure_dir(target.parent)
    temp_file = f"{target}.{uuid.uuid4().hex[:8]}.tmp"
    try:
        with open(temp_file, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(temp_file, target)
    finally:
        if os.path.exists(temp_file):
            try:
                os.remove(temp_file)
            except OSError:
                pass
