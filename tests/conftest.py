"""Shared fixtures: a small catalog, in-memory storage and a fixed clock."""

import itertools
import json

import pytest

from vocabcards.config import Config, SettingsManager
from vocabcards.services import Catalog, MemoryStorage, ProgressStore


ANIMALS = {
    "typeId": "oxford-3000",
    "topicSlug": "animals",
    "typeName": "Oxford 3000",
    "topic": "Animals",
    "vocabs": [
        {"word": "cat", "partOfSpeech": "noun", "phonetic": "/kæt/", "meaning": "a small pet"},
        {"word": "dog", "partOfSpeech": "noun", "meaning": "a loyal pet"},
        {"word": "horse", "partOfSpeech": ["noun", "verb"]},
    ],
}

FOOD = {
    "typeId": "oxford-3000",
    "topicSlug": "food",
    "topic": "Food",
    "vocabs": [
        {"word": "bread"},
        {"word": "Ice Cream"},
    ],
}

EMPTY = {
    "typeId": "ielts",
    "topicSlug": "empty",
    "topic": "Nothing Yet",
    "vocabs": [],
}


@pytest.fixture
def datasets():
    return [dict(ANIMALS), dict(FOOD), dict(EMPTY)]


@pytest.fixture
def catalog(datasets):
    return Catalog(datasets)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def clock():
    """Deterministic timestamps: 2024-01-01T00:00:00.001Z, .002Z, ..."""
    counter = itertools.count(1)
    return lambda: f"2024-01-01T00:00:00.{next(counter):03d}Z"


@pytest.fixture
def known(storage, catalog, clock):
    return ProgressStore(storage, Config.KNOWN_STORAGE_KEY, catalog, clock)


@pytest.fixture
def learn(storage, catalog, clock):
    return ProgressStore(storage, Config.LEARN_STORAGE_KEY, catalog, clock)


@pytest.fixture
def dataset_dir(tmp_path):
    """On-disk dataset tree with a _meta.json for one type."""
    root = tmp_path / "vocab"
    oxford = root / "oxford-3000"
    oxford.mkdir(parents=True)
    (oxford / "_meta.json").write_text(json.dumps({"name": "Oxford Three Thousand"}), encoding="utf-8")
    for doc in (ANIMALS, FOOD):
        payload = {"topic": doc["topic"], "vocabs": doc["vocabs"]}
        (oxford / f"{doc['topicSlug']}.json").write_text(json.dumps(payload), encoding="utf-8")
    ielts = root / "ielts"
    ielts.mkdir()
    (ielts / "empty.json").write_text(json.dumps({"topic": "Nothing Yet", "vocabs": []}), encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def fresh_settings():
    """SettingsManager is a singleton; never leak one between tests."""
    SettingsManager.reset_instance()
    yield
    SettingsManager.reset_instance()
