"""
Catalog - read-only index over the topic datasets.

Datasets are laid out as ``<typeId>/<topicSlug>.json`` with an optional
``<typeId>/_meta.json`` naming the type. The catalog is built once at
startup and never mutated afterwards.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..config import Config
from ..errors import LookupMiss, MalformedDataset
from ..models import Topic, TopicMeta, VocabEntry, VocabType
from ..utils.parsing import TextParser

logger = logging.getLogger(__name__)


class Catalog:
    """
    Index of vocabulary types, topics and words.

    Usage:
        catalog = Catalog.from_directory("data/vocab")
        topic = catalog.get_topic_data("oxford-3000/animals")
        entry = catalog.get_vocab_by_word("oxford-3000/animals", " Cat ")
    """

    def __init__(self, datasets: Optional[Iterable[Dict[str, Any]]] = None):
        self._types: Dict[str, VocabType] = {}
        self._topics: Dict[str, Topic] = {}
        self._topic_order: List[str] = []
        self._sources: Dict[str, str] = {}
        if datasets is not None:
            self.load(datasets)

    # ---- Loading ----

    def load(self, datasets: Iterable[Dict[str, Any]]) -> int:
        """
        Index raw topic documents.

        Each document is ``{typeId, topicSlug, topic, vocabs, typeName?}``.
        Malformed documents are skipped and logged, never raised.

        Returns:
            Number of documents indexed
        """
        loaded = 0
        for doc in datasets:
            try:
                self._add_document(doc)
                loaded += 1
            except MalformedDataset as e:
                logger.warning("Skipping topic document %s", e)
        return loaded

    @classmethod
    def from_directory(cls, root: Union[str, Path]) -> "Catalog":
        """Build a catalog from a ``<typeId>/<topicSlug>.json`` tree."""
        catalog = cls()
        catalog.load(iter_dataset_directory(root))
        return catalog

    def _add_document(self, doc: Any) -> None:
        source = _describe(doc)
        if not isinstance(doc, dict):
            raise MalformedDataset(source, "document is not an object")

        name = doc.get("topic")
        vocabs = doc.get("vocabs")
        if not isinstance(name, str) or not name:
            raise MalformedDataset(source, "missing 'topic'")
        if not isinstance(vocabs, list):
            raise MalformedDataset(source, "'vocabs' is not a list")

        type_id = str(doc.get("typeId") or "")
        slug = str(doc.get("topicSlug") or "")
        if not type_id or not slug:
            raise MalformedDataset(source, "missing 'typeId' or 'topicSlug'")

        entries = []
        for index, item in enumerate(vocabs):
            entry = VocabEntry.from_dict(item)
            if entry is None:
                logger.debug("Dropping vocab #%d of %s: no string 'word'", index, source)
                continue
            entries.append(entry)

        if type_id not in self._types:
            type_name = doc.get("typeName")
            if not isinstance(type_name, str) or not type_name:
                type_name = TextParser.humanize_type_id(type_id)
            self._types[type_id] = VocabType(type_id=type_id, name=type_name)

        key = Topic.make_key(type_id, slug)
        topic = Topic(topic_key=key, type_id=type_id, slug=slug, name=name, vocabs=tuple(entries))

        if key in self._topics:
            # Last loaded wins; the topic keeps its first-seen position
            logger.warning(
                "Duplicate topic key %r: %s overrides %s",
                key, source, self._sources.get(key, "<unknown>"),
            )
        else:
            self._topic_order.append(key)
        self._topics[key] = topic
        self._sources[key] = source

    # ---- Lookups ----

    def get_type_list(self) -> List[VocabType]:
        """Types in first-seen order."""
        return list(self._types.values())

    def get_type(self, type_id: str) -> Optional[VocabType]:
        return self._types.get(type_id)

    def get_topic_list(self, type_id: Optional[str] = None) -> List[TopicMeta]:
        """Topic metadata in indexing order, optionally restricted to one type."""
        metas = [self._topics[k].meta for k in self._topic_order]
        if type_id is not None:
            metas = [m for m in metas if m.type_id == type_id]
        return metas

    def get_topic_data(self, topic_key: str) -> Optional[Topic]:
        return self._topics.get(topic_key)

    def require_topic(self, topic_key: str) -> Topic:
        """Like get_topic_data but raises LookupMiss; for user-facing commands."""
        topic = self._topics.get(topic_key)
        if topic is None:
            raise LookupMiss(topic_key)
        return topic

    def get_vocab_by_word(self, topic_key: str, word: str) -> Optional[VocabEntry]:
        """Find a word in a topic, ignoring case and surrounding whitespace."""
        topic = self._topics.get(topic_key)
        if topic is None:
            return None
        key = TextParser.normalize_word(word)
        for entry in topic.vocabs:
            if entry.key == key:
                return entry
        return None

    def find_topic_by_name(self, name: str) -> Optional[TopicMeta]:
        """First topic whose display name equals ``name`` exactly."""
        for key in self._topic_order:
            topic = self._topics[key]
            if topic.name == name:
                return topic.meta
        return None

    def topic_name(self, topic_key: str) -> str:
        """Display name, degrading to the raw key for unknown topics."""
        topic = self._topics.get(topic_key)
        return topic.name if topic is not None else topic_key

    def __len__(self) -> int:
        return len(self._topics)

    def __contains__(self, topic_key: object) -> bool:
        return topic_key in self._topics


def _describe(doc: Any) -> str:
    if isinstance(doc, dict):
        if doc.get("_source"):
            return str(doc["_source"])
        if doc.get("typeId") or doc.get("topicSlug"):
            return f"{doc.get('typeId', '?')}/{doc.get('topicSlug', '?')}"
    return "<document>"


def _read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def read_type_name(type_dir: Path) -> str:
    """Display name of a type directory: ``_meta.json`` name or humanized id."""
    meta_path = type_dir / Config.TYPE_META_FILE
    if meta_path.exists():
        try:
            meta = _read_json(meta_path)
            name = meta.get("name") if isinstance(meta, dict) else None
            if isinstance(name, str) and name.strip():
                return name.strip()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", meta_path, e)
    return TextParser.humanize_type_id(type_dir.name)


def iter_dataset_directory(root: Union[str, Path]) -> Iterable[Dict[str, Any]]:
    """
    Yield raw topic documents from a dataset tree.

    Type directories and topic files are visited in sorted order so the
    indexing order is stable across platforms. Unreadable files are skipped.
    """
    root = Path(root)
    if not root.is_dir():
        logger.warning("Dataset directory %s does not exist", root)
        return

    for type_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        type_name = read_type_name(type_dir)
        for path in sorted(type_dir.glob("*.json")):
            if path.name == Config.TYPE_META_FILE:
                continue
            try:
                data = _read_json(path)
            except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Skipping topic document %s: %s", path, e)
                continue
            if not isinstance(data, dict):
                logger.warning("Skipping topic document %s: not an object", path)
                continue
            yield {
                **data,
                "typeId": type_dir.name,
                "topicSlug": path.stem,
                "typeName": type_name,
                "_source": str(path),
            }
