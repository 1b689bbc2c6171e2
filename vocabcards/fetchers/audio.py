"""Speech - pronounce words via Edge TTS."""

import logging
import os
import uuid
from dataclasses import dataclass
from typing import Optional

import aiofiles
import edge_tts

from ..config import Config
from ..utils.helpers import ensure_dir
from ..utils.parsing import TextParser
from ..utils.paths import MediaPathGenerator
from .base import BaseFetcher

logger = logging.getLogger(__name__)

# Clips smaller than this are treated as failed syntheses
MIN_CLIP_BYTES = 100


@dataclass(frozen=True)
class SpeechClip:
    """A synthesized clip and how to play it."""

    path: str
    rate: float
    plays: int = 1
    pause_ms: int = 0


def rate_to_edge(rate: float) -> str:
    """Speech rate multiplier to the edge-tts percent form (0.65 -> "-35%")."""
    return f"{int(round((rate - 1.0) * 100)):+d}%"


class SpeechService(BaseFetcher):
    """
    Best-effort text-to-speech for vocabulary words.

    Clips are cached on disk by text, voice and rate. Failures are logged
    and reported as None, never raised.
    """

    def __init__(
        self,
        voice: Optional[str] = None,
        media_dir: Optional[str] = None,
        default_rate: float = Config.DEFAULT_RATE,
        slow_rate: float = Config.SLOW_RATE,
        pause_ms: int = Config.PAUSE_BETWEEN_REPEAT_MS,
    ):
        """
        Initialize speech service.

        Args:
            voice: Edge TTS voice name (defaults to Config.VOICE)
            media_dir: Where clips are cached (defaults to Config.MEDIA_DIR)
            default_rate: Rate for normal pronunciation
            slow_rate: Rate for slow pronunciation
            pause_ms: Pause between the two plays of a repeated slow clip
        """
        self.voice = voice or Config.VOICE
        self.media_dir = media_dir or Config.MEDIA_DIR
        self.default_rate = default_rate
        self.slow_rate = slow_rate
        self.pause_ms = pause_ms

    async def speak(self, text: str, slow: bool = False, repeat: bool = False) -> Optional[SpeechClip]:
        """
        Synthesize text at normal or slow rate.

        A repeated clip is only produced for slow speech: it is played twice
        with a fixed pause in between.
        """
        clean = TextParser.clean_for_tts(text)
        if not clean:
            return None

        rate = self.slow_rate if slow else self.default_rate
        path = await self._synthesize(clean, rate)
        if path is None:
            return None

        if repeat and slow:
            return SpeechClip(path=path, rate=rate, plays=2, pause_ms=self.pause_ms)
        return SpeechClip(path=path, rate=rate)

    async def pronounce(self, word: str) -> Optional[SpeechClip]:
        """Normal speed - good for quick listen."""
        return await self.speak(word, slow=False)

    async def pronounce_slow(self, word: str) -> Optional[SpeechClip]:
        """Slow speed, twice - easier to match each sound to the IPA."""
        return await self.speak(word, slow=True, repeat=True)

    async def fetch(self, source: str) -> Optional[SpeechClip]:
        return await self.pronounce(source)

    async def _synthesize(self, text: str, rate: float) -> Optional[str]:
        output_path = MediaPathGenerator.speech_clip_path(text, self.voice, rate, self.media_dir)
        if os.path.exists(output_path) and os.path.getsize(output_path) > MIN_CLIP_BYTES:
            return output_path

        temp_path = None
        try:
            ensure_dir(os.path.dirname(output_path))

            # Atomic write: save to temp file first
            temp_path = f"{output_path}.{uuid.uuid4().hex[:8]}.tmp"

            communicate = edge_tts.Communicate(text, self.voice, rate=rate_to_edge(rate))
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in communicate.stream():
                    if chunk.get("type") == "audio" and chunk.get("data"):
                        await f.write(chunk["data"])

            if os.path.getsize(temp_path) > MIN_CLIP_BYTES:
                os.replace(temp_path, output_path)
                temp_path = None
                return output_path

            logger.warning("Speech synthesis for %r returned no audio", text)
            return None

        except Exception as e:
            logger.warning("Speech synthesis for %r failed: %s", text, str(e)[:80])
            return None

        finally:
            # Clean up temp file if it still exists (failed write)
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
