"""Tests for the speech and image collaborators (network mocked)."""

import asyncio
import os

import aiohttp

from vocabcards.fetchers import (
    BaseFetcher,
    ImageResolver,
    SpeechService,
    WikipediaImageFetcher,
    fallback_image_url,
)
from vocabcards.fetchers import audio
from vocabcards.fetchers.audio import rate_to_edge
from vocabcards.utils.paths import MediaPathGenerator


class FakeCommunicate:
    """Stands in for edge_tts.Communicate; records each construction."""

    calls = []

    def __init__(self, text, voice, rate="+0%"):
        FakeCommunicate.calls.append((text, voice, rate))

    async def stream(self):
        yield {"type": "WordBoundary"}
        yield {"type": "audio", "data": b"\x00" * 256}


class SilentCommunicate(FakeCommunicate):
    async def stream(self):
        yield {"type": "audio", "data": b""}


class StaticFetcher(BaseFetcher):
    def __init__(self, result):
        self.result = result
        self.requests = []

    async def fetch(self, source):
        self.requests.append(source)
        return self.result


class FakeResponse:
    def __init__(self, status, payload=None, error=None):
        self.status = status
        self.payload = payload
        self.error = error

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type=None):
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.params = None

    def get(self, url, params=None):
        self.params = params
        return self.response


class TestSpeechService:
    """Test clip synthesis and caching."""

    def test_rate_to_edge(self):
        """Multipliers map to signed percentages."""
        assert rate_to_edge(0.65) == "-35%"
        assert rate_to_edge(0.9) == "-10%"
        assert rate_to_edge(1.0) == "+0%"

    def test_pronounce_writes_clip(self, tmp_path, monkeypatch):
        """Normal speech is one play at the default rate."""
        FakeCommunicate.calls = []
        monkeypatch.setattr(audio.edge_tts, "Communicate", FakeCommunicate)
        service = SpeechService(voice="en-US-AriaNeural", media_dir=str(tmp_path))

        clip = asyncio.run(service.pronounce("cat"))

        assert clip is not None
        assert clip.plays == 1
        assert clip.rate == 0.9
        assert os.path.getsize(clip.path) == 256
        assert FakeCommunicate.calls == [("cat", "en-US-AriaNeural", "-10%")]

    def test_slow_repeats_with_pause(self, tmp_path, monkeypatch):
        """Slow speech is played twice with the configured pause."""
        monkeypatch.setattr(audio.edge_tts, "Communicate", FakeCommunicate)
        service = SpeechService(media_dir=str(tmp_path), pause_ms=400)

        clip = asyncio.run(service.pronounce_slow("horse"))

        assert clip.plays == 2
        assert clip.pause_ms == 400
        assert clip.rate == 0.65
        assert "_r065_" in os.path.basename(clip.path)

    def test_cached_clip_reused(self, tmp_path, monkeypatch):
        """A second request does not synthesize again."""
        FakeCommunicate.calls = []
        monkeypatch.setattr(audio.edge_tts, "Communicate", FakeCommunicate)
        service = SpeechService(media_dir=str(tmp_path))

        first = asyncio.run(service.pronounce("dog"))
        second = asyncio.run(service.pronounce("dog"))

        assert first.path == second.path
        assert len(FakeCommunicate.calls) == 1

    def test_empty_audio_is_failure(self, tmp_path, monkeypatch):
        """No audio data yields None and leaves no files behind."""
        monkeypatch.setattr(audio.edge_tts, "Communicate", SilentCommunicate)
        service = SpeechService(media_dir=str(tmp_path))
        assert asyncio.run(service.pronounce("cat")) is None
        assert os.listdir(tmp_path) == []

    def test_blank_text(self, tmp_path):
        """Nothing to say, nothing synthesized."""
        service = SpeechService(media_dir=str(tmp_path))
        assert asyncio.run(service.speak("  <b></b> ")) is None

    def test_clip_names_are_stable(self):
        """Names depend on text, voice and rate only."""
        a = MediaPathGenerator.speech_clip("Cat", "v", 0.9)
        b = MediaPathGenerator.speech_clip(" cat", "v", 0.9)
        assert a == b
        assert a.endswith("_v_r090_v1.mp3")
        assert a != MediaPathGenerator.speech_clip("cat", "v", 0.65)


class TestWikipediaImageFetcher:
    """Test the page thumbnail lookup."""

    def test_extract_thumbnail(self):
        """The first page's thumbnail source is returned."""
        data = {"query": {"pages": {"123": {"thumbnail": {"source": "https://img/cat.jpg"}}}}}
        assert WikipediaImageFetcher.extract_thumbnail(data) == "https://img/cat.jpg"
        assert WikipediaImageFetcher.extract_thumbnail({"query": {"pages": {"-1": {}}}}) is None
        assert WikipediaImageFetcher.extract_thumbnail({}) is None

    def test_fetch_success(self, monkeypatch):
        """The title is capitalized and the thumbnail size requested."""
        fetcher = WikipediaImageFetcher(thumb_size=400)
        payload = {"query": {"pages": {"1": {"thumbnail": {"source": "https://img/ice.jpg"}}}}}
        session = FakeSession(FakeResponse(200, payload))

        async def get_session():
            return session

        monkeypatch.setattr(fetcher, "_get_session", get_session)
        assert asyncio.run(fetcher.fetch("ice cream")) == "https://img/ice.jpg"
        assert session.params["titles"] == "Ice Cream"
        assert session.params["pithumbsize"] == "400"

    def test_fetch_failures(self, monkeypatch):
        """HTTP errors and client errors give None."""
        fetcher = WikipediaImageFetcher()
        for response in (FakeResponse(503), FakeResponse(200, error=aiohttp.ClientError("down"))):
            session = FakeSession(response)

            async def get_session(session=session):
                return session

            monkeypatch.setattr(fetcher, "_get_session", get_session)
            assert asyncio.run(fetcher.fetch("cat")) is None


class TestImageResolver:
    """Test the session image cache."""

    def test_fallback_url(self):
        """Placeholders are seeded by the word."""
        assert fallback_image_url("cat") == "https://picsum.photos/seed/cat/400/300"
        assert fallback_image_url("ice cream") == "https://picsum.photos/seed/ice%20cream/400/300"

    def test_resolve_without_lookup(self):
        """resolve answers with the placeholder until a lookup succeeds."""
        resolver = ImageResolver(StaticFetcher("https://img/cat.jpg"))
        assert resolver.resolve("cat") == fallback_image_url("cat")
        assert resolver.resolve("   ") == ""

    def test_resolve_best_caches_hits(self):
        """A found image is cached and served by resolve."""
        fetcher = StaticFetcher("https://img/cat.jpg")
        resolver = ImageResolver(fetcher)
        assert asyncio.run(resolver.resolve_best("Cat")) == "https://img/cat.jpg"
        assert asyncio.run(resolver.resolve_best("cat")) == "https://img/cat.jpg"
        assert fetcher.requests == ["Cat"]
        assert resolver.resolve("CAT") == "https://img/cat.jpg"

    def test_resolve_best_miss(self):
        """Misses return the placeholder and are not cached."""
        fetcher = StaticFetcher(None)
        resolver = ImageResolver(fetcher)
        assert asyncio.run(resolver.resolve_best("dog")) == fallback_image_url("dog")
        assert resolver.cached("dog") is None
        asyncio.run(resolver.resolve_best("dog"))
        assert len(fetcher.requests) == 2
