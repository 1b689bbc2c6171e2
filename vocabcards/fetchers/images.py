"""Word images - Wikipedia page thumbnails with a deterministic placeholder."""

import asyncio
import logging
import urllib.parse
from typing import Dict, Optional

import aiohttp

from ..config import Config
from ..utils.parsing import TextParser
from .base import BaseFetcher

logger = logging.getLogger(__name__)


def fallback_image_url(word: str) -> str:
    """Placeholder image seeded by the word, the same URL every time."""
    return Config.FALLBACK_IMAGE_URL.format(seed=urllib.parse.quote(word, safe=""))


def wiki_title(word: str) -> str:
    """Page title guess for a word: "ice cream" -> "Ice Cream"."""
    return TextParser.title_words(word)


class WikipediaImageFetcher(BaseFetcher):
    """Look up a page thumbnail for a word with session pooling."""

    def __init__(self, timeout: int = Config.IMAGE_TIMEOUT, thumb_size: int = Config.IMAGE_THUMB_SIZE):
        self.timeout = timeout
        self.thumb_size = thumb_size
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create a shared aiohttp session (connection pooling)."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    headers={"User-Agent": "VocabCards/1.0 (flashcard image lookup)"},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            return self._session

    async def close(self) -> None:
        """Close the aiohttp session. Call this when done with the fetcher."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                self._session = None

    def build_params(self, title: str) -> Dict[str, str]:
        return {
            "action": "query",
            "titles": title,
            "prop": "pageimages",
            "format": "json",
            "pithumbsize": str(self.thumb_size),
            "origin": "*",
        }

    @staticmethod
    def extract_thumbnail(data: dict) -> Optional[str]:
        """Thumbnail URL of the first page in a pageimages response."""
        pages = (data.get("query") or {}).get("pages") or {}
        for page in pages.values():
            thumb = (page or {}).get("thumbnail") or {}
            source = thumb.get("source")
            return source if isinstance(source, str) and source else None
        return None

    async def fetch(self, source: str) -> Optional[str]:
        """
        Thumbnail URL for a word, or None when there is none or the lookup fails.
        """
        title = wiki_title(source)
        if not title:
            return None

        try:
            session = await self._get_session()
            async with session.get(Config.WIKIPEDIA_API_URL, params=self.build_params(title)) as response:
                if response.status != 200:
                    logger.warning("Image lookup for %r: HTTP %s", title, response.status)
                    return None
                data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            logger.warning("Image lookup for %r timed out", title)
            return None
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning("Image lookup for %r failed: %s", title, str(e)[:80])
            return None

        return self.extract_thumbnail(data) if isinstance(data, dict) else None


class ImageResolver:
    """
    Session cache of word -> image URL.

    ``resolve`` answers immediately (cached match or placeholder);
    ``resolve_best`` performs the lookup and upgrades the cache.
    """

    def __init__(self, fetcher: Optional[BaseFetcher] = None):
        self.fetcher = fetcher or WikipediaImageFetcher()
        self._cache: Dict[str, str] = {}

    def resolve(self, word: str) -> str:
        key = TextParser.normalize_word(word)
        if not key:
            return ""
        return self._cache.get(key) or fallback_image_url(word.strip())

    async def resolve_best(self, word: str) -> str:
        key = TextParser.normalize_word(word)
        if not key:
            return ""
        if key in self._cache:
            return self._cache[key]

        url = await self.fetcher.fetch(word)
        if url:
            self._cache[key] = url
            return url
        return fallback_image_url(word.strip())

    def cached(self, word: str) -> Optional[str]:
        return self._cache.get(TextParser.normalize_word(word))

    async def close(self) -> None:
        await self.fetcher.close()
