"""Tests for the Known/ToLearn progress stores and legacy migration."""

import json
import logging

from vocabcards.config import Config
from vocabcards.errors import StorageUnavailable
from vocabcards.models import ProgressRecord
from vocabcards.services import MemoryStorage, ProgressStore, migrate_record


ANIMALS = "oxford-3000/animals"


class FailingStorage(MemoryStorage):
    """Reads work, writes raise."""

    def set_item(self, key, value):
        raise StorageUnavailable(key, "quota exceeded")


class TestMembership:
    """Test add/has/remove semantics."""

    def test_add_is_idempotent(self, known):
        """Adding a present pair does not grow the store."""
        assert known.add(ANIMALS, "cat") is True
        assert known.add(ANIMALS, "cat") is False
        assert known.count == 1

    def test_identity_ignores_case_and_whitespace(self, known):
        """' Cat ' and 'cat' are the same word."""
        known.add(ANIMALS, " Cat ")
        assert known.has(ANIMALS, "cat")
        assert not known.add(ANIMALS, "CAT")
        assert known.all[0].word == "Cat"

    def test_same_word_other_topic_is_distinct(self, known):
        """Identity includes the topic key."""
        known.add(ANIMALS, "cat")
        assert known.add("oxford-3000/food", "cat")
        assert known.count == 2

    def test_blank_word_ignored(self, known):
        """Empty or whitespace words are never stored."""
        assert known.add(ANIMALS, "   ") is False
        assert known.count == 0

    def test_add_then_remove(self, known):
        """Remove undoes add."""
        known.add(ANIMALS, "dog")
        assert known.remove(ANIMALS, " DOG") is True
        assert not known.has(ANIMALS, "dog")
        assert known.remove(ANIMALS, "dog") is False

    def test_insertion_order_and_timestamps(self, known):
        """Records keep chronological order with clock timestamps."""
        known.add(ANIMALS, "cat")
        known.add(ANIMALS, "dog")
        assert [r.word for r in known] == ["cat", "dog"]
        assert known.all[0].added_at == "2024-01-01T00:00:00.001Z"
        assert known.words_for_topic(ANIMALS) == ["cat", "dog"]

    def test_clear(self, learn, storage):
        """Clear empties memory and storage."""
        learn.add(ANIMALS, "cat")
        learn.clear()
        assert learn.count == 0
        assert json.loads(storage.get_item(Config.LEARN_STORAGE_KEY)) == []


class TestPersistence:
    """Test write-through and reload."""

    def test_mutations_persist(self, storage, catalog, clock):
        """A new store over the same storage sees earlier writes."""
        first = ProgressStore(storage, Config.KNOWN_STORAGE_KEY, catalog, clock)
        first.add(ANIMALS, "cat")
        first.add(ANIMALS, "dog")
        first.remove(ANIMALS, "cat")

        second = ProgressStore(storage, Config.KNOWN_STORAGE_KEY, catalog, clock)
        assert [r.to_dict() for r in second] == [
            {"topicKey": ANIMALS, "word": "dog", "addedAt": "2024-01-01T00:00:00.002Z"}
        ]

    def test_stores_use_separate_keys(self, known, learn, storage):
        """Known and ToLearn never share a storage key."""
        known.add(ANIMALS, "cat")
        learn.add(ANIMALS, "dog")
        assert set(storage.keys()) == {Config.KNOWN_STORAGE_KEY, Config.LEARN_STORAGE_KEY}

    def test_write_failure_keeps_memory_state(self, catalog, clock, caplog):
        """A failing backend is logged; the session state still changes."""
        store = ProgressStore(FailingStorage(), Config.KNOWN_STORAGE_KEY, catalog, clock)
        with caplog.at_level(logging.WARNING):
            assert store.add(ANIMALS, "cat")
        assert store.has(ANIMALS, "cat")
        assert "Could not persist" in caplog.text

    def test_non_list_value_starts_empty(self, catalog):
        """A stored object or garbage gives an empty store."""
        storage = MemoryStorage({
            Config.KNOWN_STORAGE_KEY: json.dumps({"topicKey": ANIMALS, "word": "cat"}),
            Config.LEARN_STORAGE_KEY: "not json at all",
        })
        assert ProgressStore(storage, Config.KNOWN_STORAGE_KEY, catalog).count == 0
        assert ProgressStore(storage, Config.LEARN_STORAGE_KEY, catalog).count == 0

    def test_loaded_duplicates_collapse(self, catalog):
        """Persisted duplicates are reduced to the first occurrence."""
        storage = MemoryStorage({Config.KNOWN_STORAGE_KEY: json.dumps([
            {"topicKey": ANIMALS, "word": "cat", "addedAt": "a"},
            {"topicKey": ANIMALS, "word": "CAT", "addedAt": "b"},
        ])})
        store = ProgressStore(storage, Config.KNOWN_STORAGE_KEY, catalog)
        assert [r.added_at for r in store] == ["a"]


class TestLegacyMigration:
    """Test upgrading records persisted with older field shapes."""

    def test_topic_name_resolved_through_catalog(self, catalog):
        """A display name that matches a topic becomes its key."""
        record = migrate_record({"topic": "Animals", "word": "cat", "addedAt": "x"}, catalog)
        assert record == ProgressRecord(topic_key=ANIMALS, word="cat", added_at="x")

    def test_unmatched_topic_name_kept_verbatim(self, catalog):
        """An unknown display name is used as the key."""
        record = migrate_record({"topic": "Old Topic", "word": "cat"}, catalog, lambda: "now")
        assert record.topic_key == "Old Topic"
        assert record.added_at == "now"

    def test_topic_id_field(self, catalog):
        """The earlier topicId field name is honoured."""
        record = migrate_record({"topicId": "oxford-3000/food", "word": "bread"}, catalog)
        assert record.topic_key == "oxford-3000/food"

    def test_no_topic_at_all(self):
        """Records without any topic go under 'imported'."""
        record = migrate_record({"word": "cat"})
        assert record.topic_key == Config.IMPORTED_TOPIC_KEY

    def test_unusable_elements(self):
        """Non-objects and missing words are rejected."""
        assert migrate_record("abc") is None
        assert migrate_record({"topicKey": ANIMALS}) is None
        assert migrate_record({"topicKey": ANIMALS, "word": "  "}) is None

    def test_migrated_on_load(self, catalog, clock):
        """A legacy persisted list is migrated when the store loads."""
        storage = MemoryStorage({Config.LEARN_STORAGE_KEY: json.dumps([
            {"topic": "Animals", "word": "dog"},
            {"topicKey": ANIMALS, "word": "cat", "addedAt": "t"},
            42,
        ])})
        store = ProgressStore(storage, Config.LEARN_STORAGE_KEY, catalog, clock)
        assert [(r.topic_key, r.word) for r in store] == [(ANIMALS, "dog"), (ANIMALS, "cat")]


class TestReplaceAll:
    """Test wholesale replacement used by imports."""

    def test_replaces_not_merges(self, learn):
        """Previous contents are discarded."""
        learn.add(ANIMALS, "cat")
        count = learn.replace_all([{"topicKey": "oxford-3000/food", "word": "bread", "addedAt": "t"}])
        assert count == 1
        assert not learn.has(ANIMALS, "cat")
        assert learn.has("oxford-3000/food", "bread")

    def test_invalid_candidates_dropped(self, learn):
        """Candidates need string topicKey and a non-blank word; addedAt defaults."""
        count = learn.replace_all([
            {"topicKey": ANIMALS, "word": "cat"},
            {"topicKey": 5, "word": "dog"},
            {"word": "horse"},
            "bird",
            {"topicKey": ANIMALS, "word": "Cat", "addedAt": "later"},
            {"topicKey": ANIMALS, "word": "   "},
        ])
        assert count == 1
        assert learn.all[0].added_at == "2024-01-01T00:00:00.001Z"

    def test_replace_with_empty(self, learn, storage):
        """An empty list clears and persists."""
        learn.add(ANIMALS, "cat")
        assert learn.replace_all([]) == 0
        assert json.loads(storage.get_item(Config.LEARN_STORAGE_KEY)) == []
