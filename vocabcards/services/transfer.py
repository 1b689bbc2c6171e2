"""
Import/Export of learner progress.

A backup is one JSON document ``{"known": [...], "learn": [...]}`` holding
both stores. Older exports were a bare list of to-learn records; those still
import, into the ToLearn store only. Importing replaces the affected stores
(the backup is authoritative), it never merges.
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union, TYPE_CHECKING

import aiofiles

from ..config import Config
from ..errors import BackupImportError, InvalidFormat, ParseError
from ..models import ProgressRecord
from ..utils.helpers import atomic_write_text, ensure_dir
from .progress_store import migrate_record

if TYPE_CHECKING:
    from .catalog import Catalog
    from .progress_store import ProgressStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupDocument:
    """Current shape. A field is None when absent or not a list."""

    learn: Optional[List[ProgressRecord]] = None
    known: Optional[List[ProgressRecord]] = None


@dataclass(frozen=True)
class LegacyLearnList:
    """Legacy shape: a bare list of to-learn records."""

    records: List[ProgressRecord]


DecodedBackup = Union[BackupDocument, LegacyLearnList]


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an import; counts are None for stores left untouched."""

    ok: bool
    learn_count: Optional[int] = None
    known_count: Optional[int] = None
    error: Optional[BackupImportError] = None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        parts = []
        if self.learn_count is not None:
            parts.append(f"{self.learn_count} to learn")
        if self.known_count is not None:
            parts.append(f"{self.known_count} known")
        return "Imported " + (", ".join(parts) if parts else "nothing")


def export_backup(learn: "ProgressStore", known: "ProgressStore") -> str:
    """Serialize both stores with stable key order; same state, same bytes."""
    document = {"learn": learn.to_list(), "known": known.to_list()}
    return json.dumps(document, indent=2, ensure_ascii=False, sort_keys=True) + "\n"


def _migrate_list(items: List[Any], catalog: Optional["Catalog"]) -> List[ProgressRecord]:
    records = []
    for element in items:
        record = migrate_record(element, catalog)
        if record is None:
            logger.debug("Dropping unreadable backup element: %r", element)
            continue
        records.append(record)
    return records


def _validate_list(items: List[Any]) -> List[ProgressRecord]:
    records = []
    for element in items:
        record = ProgressRecord.from_dict(element)
        if record is None or not record.word:
            logger.debug("Dropping invalid backup record: %r", element)
            continue
        records.append(record)
    return records


def decode_backup(text: str, catalog: Optional["Catalog"] = None) -> DecodedBackup:
    """
    Decode backup text into one of the two accepted shapes.

    Records of a ``{learn, known}`` document need string ``topicKey`` and
    ``word``. Elements of a legacy bare list may use the older shapes
    (``topic`` display name, ``topicId``), reconciled against the catalog.

    Raises:
        ParseError: text is not JSON
        InvalidFormat: JSON is neither shape, or a bare list holds no record
    """
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError, RecursionError) as e:
        raise ParseError(str(e)) from e

    if isinstance(parsed, dict):
        if "learn" not in parsed and "known" not in parsed:
            raise InvalidFormat()
        learn = parsed.get("learn")
        known = parsed.get("known")
        return BackupDocument(
            learn=_validate_list(learn) if isinstance(learn, list) else None,
            known=_validate_list(known) if isinstance(known, list) else None,
        )

    if isinstance(parsed, list):
        records = _migrate_list(parsed, catalog)
        if parsed and not records:
            raise InvalidFormat("Invalid format: no element is a word record")
        return LegacyLearnList(records=records)

    raise InvalidFormat()


def import_backup(
    text: str,
    learn: "ProgressStore",
    known: "ProgressStore",
    catalog: Optional["Catalog"] = None,
) -> ImportResult:
    """
    Restore stores from backup text.

    Nothing is mutated unless the whole document decodes.
    """
    try:
        decoded = decode_backup(text, catalog)
    except BackupImportError as e:
        logger.info("Rejected backup import: %s", e.message)
        return ImportResult(ok=False, error=e)

    if isinstance(decoded, LegacyLearnList):
        return ImportResult(ok=True, learn_count=learn.replace_all(decoded.records))

    learn_count = learn.replace_all(decoded.learn) if decoded.learn is not None else None
    known_count = known.replace_all(decoded.known) if decoded.known is not None else None
    return ImportResult(ok=True, learn_count=learn_count, known_count=known_count)


def default_backup_filename(now: Optional[datetime] = None) -> str:
    """Download name like easy-vocab-backup-2026-10-18.json."""
    now = now or datetime.now()
    return f"{Config.BACKUP_FILE_PREFIX}-{now:%Y-%m-%d}.json"


def write_backup_file(path: Union[str, Path], learn: "ProgressStore", known: "ProgressStore") -> Path:
    """Write an export document to disk (atomic)."""
    path = Path(path)
    atomic_write_text(path, export_backup(learn, known))
    return path


async def write_backup_file_async(
    path: Union[str, Path],
    learn: "ProgressStore",
    known: "ProgressStore",
) -> Path:
    """Async variant of write_backup_file using aiofiles."""
    path = Path(path)
    ensure_dir(path.parent)
    temp_path = f"{path}.{uuid.uuid4().hex[:8]}.tmp"
    try:
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(export_backup(learn, known))
        os.replace(temp_path, path)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)
    return path


def read_backup_file(path: Union[str, Path]) -> str:
    """
    Backup text from disk (a UTF-8 BOM is ignored).

    Raises:
        OSError: file cannot be opened
        ParseError: file is not UTF-8 text
    """
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise ParseError(f"Not a UTF-8 text file: {e}") from e
