"""Tests for derived word lists, counts and reports."""

from vocabcards.services.views import (
    REPORT_COLUMNS,
    REVIEW_COLUMNS,
    active_words,
    export_review_csv,
    is_fully_known,
    known_count,
    learn_count_for_topic,
    progress_report,
    review_frame,
    review_items,
    topic_total,
    type_summary,
)

import pandas as pd


ANIMALS = "oxford-3000/animals"


class TestActiveWords:
    """Test the drill list filter."""

    def test_all_words_in_catalog_order(self, catalog, known, learn):
        """Without the filter every word is returned."""
        known.add(ANIMALS, "cat")
        words = active_words(catalog, ANIMALS, False, known, learn)
        assert [e.word for e in words] == ["cat", "dog", "horse"]

    def test_only_new_excludes_both_stores(self, catalog, known, learn):
        """Known and to-learn words are hidden, order kept."""
        known.add(ANIMALS, "cat")
        learn.add(ANIMALS, "DOG")
        words = active_words(catalog, ANIMALS, True, known, learn)
        assert [e.word for e in words] == ["horse"]

    def test_other_topic_records_do_not_filter(self, catalog, known, learn):
        """A word known in another topic stays new here."""
        known.add("oxford-3000/food", "cat")
        words = active_words(catalog, ANIMALS, True, known, learn)
        assert len(words) == 3

    def test_unknown_topic(self, catalog, known, learn):
        """Unknown topics have no words."""
        assert active_words(catalog, "nope/nope", True, known, learn) == []


class TestCounts:
    """Test per-topic and per-type counts."""

    def test_known_count_only_counts_catalog_words(self, catalog, known):
        """Records for words no longer in the topic are ignored."""
        known.add(ANIMALS, "cat")
        known.add(ANIMALS, "unicorn")
        assert known_count(catalog, ANIMALS, known) == 1
        assert topic_total(catalog, ANIMALS) == 3

    def test_fully_known(self, catalog, known):
        """Fully known needs every word known."""
        for word in ("cat", "dog"):
            known.add(ANIMALS, word)
        assert not is_fully_known(catalog, ANIMALS, known)
        known.add(ANIMALS, "Horse")
        assert is_fully_known(catalog, ANIMALS, known)

    def test_empty_topic_never_fully_known(self, catalog, known):
        """A topic with no words is not fully known."""
        assert topic_total(catalog, "ielts/empty") == 0
        assert not is_fully_known(catalog, "ielts/empty", known)

    def test_learn_count_for_topic(self, learn):
        """Counts raw to-learn records of one topic."""
        learn.add(ANIMALS, "cat")
        learn.add(ANIMALS, "gone")
        learn.add("oxford-3000/food", "bread")
        assert learn_count_for_topic(learn, ANIMALS) == 2

    def test_type_summary(self, catalog, known):
        """Totals aggregate over the type's topics."""
        for word in ("bread", "ice cream"):
            known.add("oxford-3000/food", word)
        summary = type_summary(catalog, "oxford-3000", known)
        assert summary == {"topics": 2, "total": 5, "known": 2, "fully_known_topics": 1}


class TestReports:
    """Test the pandas-backed report and review list."""

    def test_progress_report(self, catalog, known, learn):
        """One row per topic with consistent counts."""
        known.add(ANIMALS, "cat")
        learn.add(ANIMALS, "dog")
        report = progress_report(catalog, known, learn)
        assert list(report.columns) == REPORT_COLUMNS
        assert len(report) == 3
        row = report[report["topic_key"] == ANIMALS].iloc[0]
        assert row["total"] == 3
        assert row["known"] == 1
        assert row["to_learn"] == 1
        assert row["new"] == 1
        assert not row["fully_known"]

    def test_progress_report_empty_type(self, catalog, known, learn):
        """An unknown type gives an empty frame with the columns."""
        report = progress_report(catalog, known, learn, "missing")
        assert report.empty
        assert list(report.columns) == REPORT_COLUMNS

    def test_review_items_resolve_entries(self, catalog, learn):
        """Records join their catalog entry; orphans show the raw key."""
        learn.add(ANIMALS, "Cat")
        learn.add("retired/topic", "relic")
        items = review_items(catalog, learn)
        assert items[0].topic_name == "Animals"
        assert items[0].entry.meaning == "a small pet"
        assert items[1].is_orphan
        assert items[1].topic_name == "retired/topic"

    def test_review_csv(self, catalog, learn, tmp_path):
        """The review list is written as a '|' separated CSV."""
        learn.add(ANIMALS, "cat")
        learn.add(ANIMALS, "horse")
        path = tmp_path / "review.csv"
        assert export_review_csv(catalog, learn, str(path))
        frame = pd.read_csv(path, sep="|", encoding="utf-8-sig", keep_default_na=False)
        assert list(frame.columns) == REVIEW_COLUMNS
        assert list(frame["word"]) == ["cat", "horse"]
        assert list(frame["part_of_speech"]) == ["noun", "noun, verb"]

    def test_review_csv_unwritable(self, catalog, learn, tmp_path):
        """A path inside a missing directory reports failure."""
        path = tmp_path / "missing" / "review.csv"
        assert export_review_csv(catalog, learn, str(path)) is False

    def test_review_frame_empty(self, catalog, learn):
        """No records, no rows."""
        assert review_frame(catalog, learn).empty
