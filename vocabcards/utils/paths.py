"""
Speech clip file names.

A clip's name is derived from the spoken text, the voice and the rate, so
asking for the same pronunciation twice reuses the cached file.
"""

import hashlib
from pathlib import Path
from typing import Optional

from ..config import Config


class MediaPathGenerator:
    """Naming scheme for cached speech clips."""

    # Bump to orphan clips produced by an older naming or audio format
    VERSION = "v1"
    AUDIO_EXT = ".mp3"

    @classmethod
    def rate_tag(cls, rate: float) -> str:
        """0.65 -> "r065"."""
        return f"r{int(round(rate * 100)):03d}"

    @classmethod
    def text_digest(cls, text: str) -> str:
        """Case- and padding-insensitive 16 hex char digest of the text."""
        return hashlib.sha256(text.strip().lower().encode("utf-8")).hexdigest()[:16]

    @classmethod
    def speech_clip(cls, text: str, voice: str, rate: float) -> str:
        """e.g. "_say_1a2b3c4d5e6f7a8b_en-US-AriaNeural_r090_v1.mp3"."""
        return f"_say_{cls.text_digest(text)}_{voice}_{cls.rate_tag(rate)}_{cls.VERSION}{cls.AUDIO_EXT}"

    @classmethod
    def speech_clip_path(cls, text: str, voice: str, rate: float, media_dir: Optional[str] = None) -> str:
        folder = Path(media_dir or Config.MEDIA_DIR)
        return str(folder / cls.speech_clip(text, voice, rate))
