"""Word identity and display-text helpers shared by every layer."""

import html
import re
import unicodedata


class TextParser:
    """
    String rules in one place.

    ``normalize_word`` is the identity function for vocabulary words: the
    catalog lookup, both progress stores and the views all compare words
    through it, so " Cat " and "cat" address the same entry everywhere.
    """

    MARKUP = re.compile(r'<[^>]+>')
    SPACES = re.compile(r'\s+')

    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """NFC form, so a precomposed and a combining "é" compare equal."""
        return unicodedata.normalize('NFC', str(text)) if text else ""

    @classmethod
    def normalize_word(cls, word: str) -> str:
        """Trimmed, lowercased, NFC identity key ("" for None/blank)."""
        if not word:
            return ""
        return cls.normalize_unicode(str(word).strip().lower())

    @classmethod
    def same_word(cls, a: str, b: str) -> bool:
        return cls.normalize_word(a) == cls.normalize_word(b)

    @classmethod
    def humanize_type_id(cls, type_id: str) -> str:
        """Fallback type display name: "oxford-3000" -> "Oxford 3000"."""
        parts = [p for p in str(type_id or "").split("-") if p]
        return " ".join(p[:1].upper() + p[1:] for p in parts)

    @classmethod
    def title_words(cls, text: str) -> str:
        """Page-title guess: "ice CREAM" -> "Ice Cream"."""
        trimmed = str(text or "").strip()
        if not trimmed:
            return ""
        return " ".join(p[:1].upper() + p[1:].lower() for p in cls.SPACES.split(trimmed))

    @classmethod
    def clean_for_tts(cls, text: str) -> str:
        """Spoken form of a word or sentence: entities decoded, tags and extra spaces dropped."""
        if not text:
            return ""
        plain = cls.MARKUP.sub('', html.unescape(str(text)))
        return cls.normalize_unicode(cls.SPACES.sub(' ', plain).strip())
