"""Progress records shared by the Known and ToLearn stores."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ..utils.helpers import utc_now_iso
from ..utils.parsing import TextParser


@dataclass(frozen=True)
class ProgressRecord:
    """
    One (topicKey, word) pair the learner has acted on.

    Records are never edited in place; a store only appends or drops them.
    """

    topic_key: str
    word: str
    added_at: str

    @property
    def identity(self) -> Tuple[str, str]:
        """Set identity within a store: topic key plus normalized word."""
        return (self.topic_key, TextParser.normalize_word(self.word))

    def matches(self, topic_key: str, word: str) -> bool:
        return self.topic_key == topic_key and TextParser.same_word(self.word, word)

    def to_dict(self) -> Dict[str, str]:
        """Persisted/exported shape."""
        return {"topicKey": self.topic_key, "word": self.word, "addedAt": self.added_at}

    @classmethod
    def from_dict(
        cls,
        data: Any,
        clock: Optional[Callable[[], str]] = None,
    ) -> Optional["ProgressRecord"]:
        """
        Strict decode: requires string ``topicKey`` and ``word``.

        ``addedAt`` falls back to the current time when missing or not a
        string. Returns None for anything else.
        """
        if isinstance(data, ProgressRecord):
            return data
        if not isinstance(data, dict):
            return None
        topic_key = data.get("topicKey")
        word = data.get("word")
        if not isinstance(topic_key, str) or not isinstance(word, str):
            return None
        added_at = data.get("addedAt")
        if not isinstance(added_at, str):
            added_at = (clock or utc_now_iso)()
        return cls(topic_key=topic_key, word=word.strip(), added_at=added_at)
