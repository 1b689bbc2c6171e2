"""Fetchers module - speech and image collaborators."""

from .base import BaseFetcher
from .audio import SpeechClip, SpeechService
from .images import ImageResolver, WikipediaImageFetcher, fallback_image_url

__all__ = [
    'BaseFetcher',
    'ImageResolver',
    'SpeechClip',
    'SpeechService',
    'WikipediaImageFetcher',
    'fallback_image_url',
]
