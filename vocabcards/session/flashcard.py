"""
Flashcard session - card sequencing and learner transitions.

The session owns no progress data; it reads the catalog and moves words
between the Known and ToLearn stores. Keeping the two stores disjoint for a
given word is this layer's job: marking a word known always drops it from
the to-learn list first.
"""

import logging
from typing import List, Optional, Tuple, TYPE_CHECKING

from ..models import Topic, VocabEntry
from ..services.views import active_words
from ..utils.parsing import TextParser

if TYPE_CHECKING:
    from ..services.catalog import Catalog
    from ..services.progress_store import ProgressStore

logger = logging.getLogger(__name__)


class FlashcardSession:
    """
    Current topic, current card and the drill list.

    With the "only new" filter on, the drill list is computed once when the
    filter is set, so marking cards during a run does not shift the indices.
    """

    def __init__(self, catalog: "Catalog", known: "ProgressStore", learn: "ProgressStore"):
        self.catalog = catalog
        self.known = known
        self.learn = learn
        self.current_topic_key: Optional[str] = None
        self.current_index: int = 0
        self.custom_vocabs: Optional[List[VocabEntry]] = None

    # ---- Navigation ----

    @property
    def current_topic(self) -> Optional[Topic]:
        if self.current_topic_key is None:
            return None
        return self.catalog.get_topic_data(self.current_topic_key)

    @property
    def vocabs(self) -> List[VocabEntry]:
        if self.custom_vocabs is not None:
            return self.custom_vocabs
        topic = self.current_topic
        return list(topic.vocabs) if topic is not None else []

    @property
    def current_word(self) -> Optional[VocabEntry]:
        vocabs = self.vocabs
        if 0 <= self.current_index < len(vocabs):
            return vocabs[self.current_index]
        return None

    @property
    def has_next(self) -> bool:
        return self.current_index < len(self.vocabs) - 1

    @property
    def has_prev(self) -> bool:
        return self.current_index > 0

    @property
    def progress(self) -> Tuple[int, int]:
        """(1-based position, total); (0, 0) for an empty list."""
        total = len(self.vocabs)
        return (min(self.current_index + 1, total), total)

    def set_topic(self, topic_key: str) -> None:
        self.current_topic_key = topic_key
        self.custom_vocabs = None
        self.current_index = 0

    def set_filter_only_new(self, only_new: bool) -> None:
        """Restrict the drill list to words in neither store. Call after set_topic."""
        if self.current_topic_key is None:
            return
        if only_new:
            self.custom_vocabs = active_words(
                self.catalog, self.current_topic_key, True, self.known, self.learn
            )
        else:
            self.custom_vocabs = None
        self.current_index = 0

    def next_word(self) -> None:
        if self.has_next:
            self.current_index += 1

    def prev_word(self) -> None:
        if self.has_prev:
            self.current_index -= 1

    def go_to_index(self, index: int) -> None:
        total = len(self.vocabs)
        self.current_index = max(0, min(index, total - 1))

    def reset(self) -> None:
        self.current_topic_key = None
        self.custom_vocabs = None
        self.current_index = 0

    # ---- Transitions ----

    def check_answer(self, typed: str) -> bool:
        """
        Self-check: does the typed text match the current word?

        A correct answer puts the word on the to-learn list (unless it is
        already known).
        """
        entry = self.current_word
        if entry is None or self.current_topic_key is None:
            return False
        if not TextParser.same_word(typed, entry.word):
            return False
        if not self.known.has(self.current_topic_key, entry.word):
            self.learn.add(self.current_topic_key, entry.word)
        return True

    def mark_known(self) -> bool:
        """The learner already knows the current card."""
        entry = self.current_word
        if entry is None or self.current_topic_key is None:
            return False
        self.mark_learned(self.current_topic_key, entry.word)
        return True

    def mark_to_learn(self) -> bool:
        """Queue the current card for review unless it is known."""
        entry = self.current_word
        if entry is None or self.current_topic_key is None:
            return False
        if self.known.has(self.current_topic_key, entry.word):
            return False
        return self.learn.add(self.current_topic_key, entry.word)

    def mark_learned(self, topic_key: str, word: str) -> None:
        """Move a word from the to-learn list to the known list."""
        self.learn.remove(topic_key, word)
        self.known.add(topic_key, word)
        logger.debug("Marked %s/%s as known", topic_key, word)

    def skip(self) -> None:
        self.next_word()
