"""Data models for VocabCards."""

from .vocab import PartOfSpeech, Topic, TopicMeta, VocabEntry, VocabType
from .progress import ProgressRecord

__all__ = [
    'PartOfSpeech',
    'ProgressRecord',
    'Topic',
    'TopicMeta',
    'VocabEntry',
    'VocabType',
]
