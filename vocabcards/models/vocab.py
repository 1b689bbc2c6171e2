"""Catalog data models: vocabulary entries, topics and types."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..utils.parsing import TextParser


PartOfSpeech = Union[str, Tuple[str, ...]]


@dataclass(frozen=True)
class VocabEntry:
    """One word of a topic, immutable once loaded."""

    word: str
    part_of_speech: PartOfSpeech = ""
    phonetic: str = ""
    meaning: str = ""
    example_sentences: Tuple[str, ...] = ()

    @property
    def key(self) -> str:
        """Case-insensitive identity of the entry."""
        return TextParser.normalize_word(self.word)

    @property
    def pos_tags(self) -> List[str]:
        if isinstance(self.part_of_speech, tuple):
            return list(self.part_of_speech)
        return [self.part_of_speech] if self.part_of_speech else []

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["VocabEntry"]:
        """
        Build an entry from a dataset item.

        Returns None when the item is not an object with a string ``word``.
        """
        if not isinstance(data, dict) or not isinstance(data.get("word"), str):
            return None

        pos = data.get("partOfSpeech", "")
        if isinstance(pos, list):
            pos = tuple(str(p) for p in pos if isinstance(p, str))
        elif not isinstance(pos, str):
            pos = ""

        sentences = data.get("exampleSentences") or []
        if not isinstance(sentences, list):
            sentences = []

        phonetic = data.get("phonetic", "")
        meaning = data.get("meaning", "")
        return cls(
            word=data["word"],
            part_of_speech=pos,
            phonetic=phonetic if isinstance(phonetic, str) else "",
            meaning=meaning if isinstance(meaning, str) else "",
            example_sentences=tuple(s for s in sentences if isinstance(s, str)),
        )

    def to_dict(self) -> Dict[str, Any]:
        pos = list(self.part_of_speech) if isinstance(self.part_of_speech, tuple) else self.part_of_speech
        return {
            "word": self.word,
            "partOfSpeech": pos,
            "phonetic": self.phonetic,
            "meaning": self.meaning,
            "exampleSentences": list(self.example_sentences),
        }


@dataclass(frozen=True)
class VocabType:
    """Organizational grouping of topics (one dataset directory)."""

    type_id: str
    name: str


@dataclass(frozen=True)
class TopicMeta:
    """Listing view of a topic, without its words."""

    topic_key: str
    type_id: str
    slug: str
    name: str
    word_count: int = 0


@dataclass(frozen=True)
class Topic:
    """A named, ordered collection of vocabulary entries."""

    topic_key: str
    type_id: str
    slug: str
    name: str
    vocabs: Tuple[VocabEntry, ...] = field(default_factory=tuple)

    @staticmethod
    def make_key(type_id: str, slug: str) -> str:
        return f"{type_id}/{slug}"

    @property
    def meta(self) -> TopicMeta:
        return TopicMeta(
            topic_key=self.topic_key,
            type_id=self.type_id,
            slug=self.slug,
            name=self.name,
            word_count=len(self.vocabs),
        )

    def __len__(self) -> int:
        return len(self.vocabs)
