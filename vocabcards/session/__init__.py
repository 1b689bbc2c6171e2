"""Learning session module."""

from .flashcard import FlashcardSession

__all__ = ['FlashcardSession']
