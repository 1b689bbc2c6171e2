"""
Progress Store - persisted, deduplicated set of (topicKey, word) records.

Two instances run side by side: one for words the learner already knows and
one for words being drilled. Both share this contract; only the storage key
differs. Every mutation rewrites the whole persisted list before returning.
"""

import json
import logging
from typing import Any, Callable, Iterable, Iterator, List, Optional, TYPE_CHECKING

from ..config import Config
from ..errors import StorageUnavailable
from ..models import ProgressRecord
from ..utils.helpers import utc_now_iso
from ..utils.parsing import TextParser

if TYPE_CHECKING:
    from .catalog import Catalog
    from .storage import BaseStorage

logger = logging.getLogger(__name__)

Clock = Callable[[], str]


def migrate_record(
    raw: Any,
    catalog: Optional["Catalog"] = None,
    clock: Optional[Clock] = None,
) -> Optional[ProgressRecord]:
    """
    Decode one persisted or imported element into a ProgressRecord.

    Older data may carry the topic's display name (``topic``) or the earlier
    field name ``topicId`` instead of ``topicKey``. The topic key is taken,
    in order, from ``topicKey``, ``topicId``, the ``topic`` display name
    resolved against the catalog (or kept verbatim when no topic has that
    name), and finally ``"imported"``.

    Args:
        raw: Parsed JSON element
        catalog: Catalog used to resolve legacy display names
        clock: Timestamp source for records without ``addedAt``

    Returns:
        The migrated record, or None when ``raw`` has no usable ``word``
    """
    if isinstance(raw, ProgressRecord):
        return raw
    if not isinstance(raw, dict) or not isinstance(raw.get("word"), str):
        return None

    word = raw["word"].strip()
    if not word:
        return None

    if isinstance(raw.get("topicKey"), str):
        topic_key = raw["topicKey"]
    elif isinstance(raw.get("topicId"), str):
        topic_key = raw["topicId"]
    elif isinstance(raw.get("topic"), str):
        name = raw["topic"]
        meta = catalog.find_topic_by_name(name) if catalog is not None else None
        topic_key = meta.topic_key if meta is not None else name
    else:
        topic_key = Config.IMPORTED_TOPIC_KEY

    added_at = raw.get("addedAt")
    if not isinstance(added_at, str):
        added_at = (clock or utc_now_iso)()

    return ProgressRecord(topic_key=topic_key, word=word, added_at=added_at)


def dedupe_records(records: Iterable[ProgressRecord]) -> List[ProgressRecord]:
    """Drop later records whose identity was already seen; order preserved."""
    seen = set()
    out = []
    for record in records:
        if record.identity in seen:
            continue
        seen.add(record.identity)
        out.append(record)
    return out


class ProgressStore:
    """
    Ordered set of ProgressRecord backed by one key of a key-value storage.

    Identity is (topic_key, trimmed lowercase word); adding a present pair
    is a no-op. The store does not keep Known and ToLearn disjoint, the
    learning workflow does.

    Usage:
        known = ProgressStore(storage, Config.KNOWN_STORAGE_KEY, catalog)
        known.add("oxford-3000/animals", "Cat")
        known.has("oxford-3000/animals", " cat ")  # True
    """

    def __init__(
        self,
        storage: "BaseStorage",
        storage_key: str,
        catalog: Optional["Catalog"] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the store and migrate whatever is persisted.

        Args:
            storage: Key-value backend
            storage_key: Key holding this store's JSON list
            catalog: Catalog used to resolve legacy topic names on load
            clock: Timestamp source (ISO strings); UTC now by default
        """
        self.storage = storage
        self.storage_key = storage_key
        self.catalog = catalog
        self._clock: Clock = clock or utc_now_iso
        self._items: List[ProgressRecord] = self._load()

    # ---- IO ----

    def _load(self) -> List[ProgressRecord]:
        try:
            raw = self.storage.get_item(self.storage_key)
        except StorageUnavailable as e:
            logger.warning("Starting %s empty: %s", self.storage_key, e)
            return []

        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Starting %s empty: stored value is not JSON (%s)", self.storage_key, e)
            return []

        if not isinstance(parsed, list):
            logger.warning("Starting %s empty: stored value is not a list", self.storage_key)
            return []

        records = []
        for element in parsed:
            record = migrate_record(element, self.catalog, self._clock)
            if record is None:
                logger.debug("Dropping unreadable %s element: %r", self.storage_key, element)
                continue
            records.append(record)
        return dedupe_records(records)

    def _persist(self) -> None:
        payload = json.dumps([r.to_dict() for r in self._items], ensure_ascii=False)
        try:
            self.storage.set_item(self.storage_key, payload)
        except StorageUnavailable as e:
            # In-memory state stays authoritative for the session
            logger.warning("Could not persist %s: %s", self.storage_key, e)

    # ---- Queries ----

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def all(self) -> List[ProgressRecord]:
        """Live list in insertion (chronological) order."""
        return self._items

    def has(self, topic_key: str, word: str) -> bool:
        return any(r.matches(topic_key, word) for r in self._items)

    def words_for_topic(self, topic_key: str) -> List[str]:
        return [r.word for r in self._items if r.topic_key == topic_key]

    def to_list(self) -> List[dict]:
        return [r.to_dict() for r in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ProgressRecord]:
        return iter(list(self._items))

    # ---- Mutations ----

    def add(self, topic_key: str, word: str) -> bool:
        """
        Append a record unless the pair is already present.

        Returns:
            True if a record was added
        """
        if not TextParser.normalize_word(word) or self.has(topic_key, word):
            return False
        self._items.append(ProgressRecord(topic_key=topic_key, word=word.strip(), added_at=self._clock()))
        self._persist()
        return True

    def remove(self, topic_key: str, word: str) -> bool:
        """
        Drop the matching record, if any.

        Returns:
            True if a record was removed
        """
        kept = [r for r in self._items if not r.matches(topic_key, word)]
        removed = len(kept) != len(self._items)
        self._items[:] = kept
        self._persist()
        return removed

    def clear(self) -> None:
        self._items.clear()
        self._persist()

    def replace_all(self, records: Iterable[Any]) -> int:
        """
        Replace the whole store with validated records (not a merge).

        Candidates need string ``topicKey`` and ``word``; others are dropped.
        Missing ``addedAt`` is set to now. Repeated identities keep the first.

        Returns:
            Number of records now in the store
        """
        valid = []
        for candidate in records or []:
            record = ProgressRecord.from_dict(candidate, self._clock)
            if record is None or not record.word:
                logger.debug("Dropping invalid %s record: %r", self.storage_key, candidate)
                continue
            valid.append(record)
        self._items[:] = dedupe_records(valid)
        self._persist()
        return len(self._items)
