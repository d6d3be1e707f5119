"""Unit tests for ArtifactFetcher."""

import pytest

from app.generation.services.fetcher import NOT_READY_MESSAGE, ArtifactFetcher
from reelsmith_core.domain.exceptions import ArtifactDownloadError, ArtifactNotReadyError
from reelsmith_core.runtime.budget import StageBudget
from reelsmith_core.runtime.http_client import ProviderResponseError
from tests.app.generation.fakes import FakeClock, FakeVideoProvider

NOT_FOUND = ProviderResponseError(404, '{"error": "not found"}')


class TestArtifactFetcher:
    @pytest.mark.asyncio
    async def test_retries_canonical_until_available(self, clock):
        """Two misses then success: bytes returned, direct link never used."""
        provider = FakeVideoProvider(content=[NOT_FOUND, NOT_FOUND, b"video"])
        fetcher = _fetcher(provider, clock)

        content = await fetcher.fetch("video_123")

        assert content == b"video"
        assert provider.content_calls == 3
        assert provider.direct_calls == []
        assert clock.sleeps == [5, 5]

    @pytest.mark.asyncio
    async def test_canonical_success_skips_fallback(self, clock):
        provider = FakeVideoProvider(content=[b"video"])
        fetcher = _fetcher(provider, clock)

        content = await fetcher.fetch("video_123", fallback_url="https://a/direct.mp4")

        assert content == b"video"
        assert provider.direct_calls == []

    @pytest.mark.asyncio
    async def test_uses_fallback_when_canonical_fails(self, clock):
        provider = FakeVideoProvider(content=[NOT_FOUND], direct=[b"direct-video"])
        fetcher = _fetcher(provider, clock)

        content = await fetcher.fetch("video_123", fallback_url="https://a/direct.mp4")

        assert content == b"direct-video"
        assert provider.direct_calls == ["https://a/direct.mp4"]

    @pytest.mark.asyncio
    async def test_not_ready_after_budget(self, clock):
        """Both locations fail for the whole budget: distinct retryable failure."""
        provider = FakeVideoProvider(
            content=[NOT_FOUND],
            direct=[ProviderResponseError(403, "signature expired")],
        )
        fetcher = _fetcher(provider, clock, timeout=20)

        with pytest.raises(ArtifactNotReadyError) as exc_info:
            await fetcher.fetch("video_123", fallback_url="https://a/direct.mp4")

        assert exc_info.value.message_safe == NOT_READY_MESSAGE
        assert exc_info.value.retryable is True
        # Attempts at t=0, 5, 10, 15, 20
        assert exc_info.value.attempts == 5
        assert provider.content_calls == 5
        assert len(provider.direct_calls) == 5

    @pytest.mark.asyncio
    async def test_empty_body_counts_as_miss(self, clock):
        provider = FakeVideoProvider(content=[b"", b"video"])
        fetcher = _fetcher(provider, clock)

        assert await fetcher.fetch("video_123") == b"video"
        assert provider.content_calls == 2

    @pytest.mark.asyncio
    async def test_fatal_status_stops_immediately(self, clock):
        provider = FakeVideoProvider(content=[ProviderResponseError(401, "invalid api key")])
        fetcher = _fetcher(provider, clock)

        with pytest.raises(ArtifactDownloadError) as exc_info:
            await fetcher.fetch("video_123", fallback_url="https://a/direct.mp4")

        assert exc_info.value.status_code == 401
        assert exc_info.value.retryable is False
        assert provider.content_calls == 1
        assert provider.direct_calls == []
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_transport_errors_are_waited_out(self, clock):
        provider = FakeVideoProvider(content=[ProviderResponseError(None, "reset"), b"video"])
        fetcher = _fetcher(provider, clock)

        assert await fetcher.fetch("video_123") == b"video"


def _fetcher(provider, clock, timeout: float = 60):
    return ArtifactFetcher(
        provider,
        StageBudget(interval=5, timeout=timeout),
        fatal_statuses=(400, 401, 403),
        sleep=clock.sleep,
        clock=clock,
    )


# --- Fixtures ---


@pytest.fixture
def clock():
    return FakeClock()
