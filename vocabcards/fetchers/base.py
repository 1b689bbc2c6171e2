"""Common base for the network-backed collaborators (speech, images)."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseFetcher(ABC):
    """
    A best-effort async lookup keyed by a word or phrase.

    ``fetch`` reports failure as None rather than raising, and nothing here
    ever touches progress state. Use as ``async with`` to release sessions.
    """

    @abstractmethod
    async def fetch(self, source: str) -> Optional[Any]:
        """Resource for ``source`` (clip, URL, ...), or None."""

    async def close(self) -> None:
        """Release sessions or connections; nothing to do by default."""

    async def __aenter__(self) -> "BaseFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
