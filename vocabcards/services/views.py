"""
Filter/View engine - derived word lists and counts.

Everything here is a plain function of the catalog and the current store
contents. Nothing is cached; stores change after almost every card, so each
query recomputes from live state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import pandas as pd

from ..models import ProgressRecord, VocabEntry

if TYPE_CHECKING:
    from .catalog import Catalog
    from .progress_store import ProgressStore

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ["type_id", "topic_key", "topic", "total", "known", "to_learn", "new", "fully_known"]
REVIEW_COLUMNS = ["topic_key", "topic", "word", "part_of_speech", "phonetic", "meaning", "added_at"]


def active_words(
    catalog: "Catalog",
    topic_key: str,
    only_new: bool,
    known: "ProgressStore",
    learn: "ProgressStore",
) -> List[VocabEntry]:
    """
    Words to drill for a topic.

    With ``only_new`` the catalog order is kept but words present in either
    store for this topic are left out.
    """
    topic = catalog.get_topic_data(topic_key)
    if topic is None:
        return []
    if not only_new:
        return list(topic.vocabs)
    return [
        entry for entry in topic.vocabs
        if not known.has(topic_key, entry.word) and not learn.has(topic_key, entry.word)
    ]


def topic_total(catalog: "Catalog", topic_key: str) -> int:
    topic = catalog.get_topic_data(topic_key)
    return len(topic.vocabs) if topic is not None else 0


def known_count(catalog: "Catalog", topic_key: str, known: "ProgressStore") -> int:
    """Catalog words of the topic that are marked known."""
    topic = catalog.get_topic_data(topic_key)
    if topic is None:
        return 0
    return sum(1 for entry in topic.vocabs if known.has(topic_key, entry.word))


def learn_count_for_topic(learn: "ProgressStore", topic_key: str) -> int:
    return sum(1 for r in learn.all if r.topic_key == topic_key)


def is_fully_known(catalog: "Catalog", topic_key: str, known: "ProgressStore") -> bool:
    """True iff the topic has words and every one of them is known."""
    topic = catalog.get_topic_data(topic_key)
    if topic is None or not topic.vocabs:
        return False
    return all(known.has(topic_key, entry.word) for entry in topic.vocabs)


def type_summary(catalog: "Catalog", type_id: str, known: "ProgressStore") -> Dict[str, int]:
    """Aggregate counts over every topic of one type."""
    topics = catalog.get_topic_list(type_id)
    return {
        "topics": len(topics),
        "total": sum(topic_total(catalog, t.topic_key) for t in topics),
        "known": sum(known_count(catalog, t.topic_key, known) for t in topics),
        "fully_known_topics": sum(1 for t in topics if is_fully_known(catalog, t.topic_key, known)),
    }


def progress_report(
    catalog: "Catalog",
    known: "ProgressStore",
    learn: "ProgressStore",
    type_id: Optional[str] = None,
) -> pd.DataFrame:
    """One row per topic with total/known/to-learn/new counts."""
    rows = []
    for meta in catalog.get_topic_list(type_id):
        key = meta.topic_key
        total = topic_total(catalog, key)
        rows.append({
            "type_id": meta.type_id,
            "topic_key": key,
            "topic": meta.name,
            "total": total,
            "known": known_count(catalog, key, known),
            "to_learn": learn_count_for_topic(learn, key),
            "new": len(active_words(catalog, key, True, known, learn)),
            "fully_known": is_fully_known(catalog, key, known),
        })
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


@dataclass(frozen=True)
class ReviewItem:
    """A ToLearn record joined with its catalog entry, when one still exists."""

    record: ProgressRecord
    topic_name: str
    entry: Optional[VocabEntry] = None

    @property
    def is_orphan(self) -> bool:
        return self.entry is None

    def to_row(self) -> Dict[str, Any]:
        entry = self.entry
        return {
            "topic_key": self.record.topic_key,
            "topic": self.topic_name,
            "word": self.record.word,
            "part_of_speech": ", ".join(entry.pos_tags) if entry else "",
            "phonetic": entry.phonetic if entry else "",
            "meaning": entry.meaning if entry else "",
            "added_at": self.record.added_at,
        }


def review_items(catalog: "Catalog", learn: "ProgressStore") -> List[ReviewItem]:
    """Resolve ToLearn records against the catalog; unknown topics show their raw key."""
    return [
        ReviewItem(
            record=record,
            topic_name=catalog.topic_name(record.topic_key),
            entry=catalog.get_vocab_by_word(record.topic_key, record.word),
        )
        for record in learn.all
    ]


def review_frame(catalog: "Catalog", learn: "ProgressStore") -> pd.DataFrame:
    return pd.DataFrame([item.to_row() for item in review_items(catalog, learn)], columns=REVIEW_COLUMNS)


def export_review_csv(catalog: "Catalog", learn: "ProgressStore", csv_path: str) -> bool:
    """Write the review list as a '|' separated CSV."""
    try:
        review_frame(catalog, learn).to_csv(csv_path, sep='|', index=False, encoding='utf-8-sig')
        return True
    except OSError as e:
        logger.warning("Could not write review CSV %s: %s", csv_path, e)
        return False
