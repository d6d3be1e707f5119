"""
Artifact fetcher: download a finished video, waiting out propagation lag.

The provider can report a job ``completed`` before the MP4 is retrievable.
Each attempt tries the canonical content endpoint and, if that fails and
the poll loop captured a direct link, the direct link. Attempts repeat at a
fixed interval until one succeeds or the fetch budget runs out.
"""

from __future__ import annotations

import asyncio
import time

from loguru import logger

from app.generation.protocols import VideoProvider
from reelsmith_core.domain.exceptions import ArtifactDownloadError, ArtifactNotReadyError
from reelsmith_core.runtime.budget import Clock, Sleep, StageBudget
from reelsmith_core.runtime.context import RunContext
from reelsmith_core.runtime.http_client import ProviderResponseError

NOT_READY_MESSAGE = "Video is not ready yet; the job may still complete, try again later"


class ArtifactFetcher:
    """Retrieves artifact bytes with bounded, fixed-interval retries."""

    def __init__(
        self,
        provider: VideoProvider,
        budget: StageBudget,
        fatal_statuses: tuple[int, ...] = (400, 401, 403),
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ):
        """
        Args:
            provider: Video provider to download from.
            budget: Retry spacing and total fetch budget.
            fatal_statuses: Content-endpoint statuses that end the fetch at
                once instead of being waited out.
            sleep: Awaitable sleep (injectable for tests).
            clock: Monotonic clock (injectable for tests).
        """
        self.provider = provider
        self.budget = budget
        self.fatal_statuses = frozenset(fatal_statuses)
        self._sleep = sleep
        self._clock = clock

    async def fetch(
        self,
        video_id: str,
        fallback_url: str | None = None,
        context: RunContext | None = None,
    ) -> bytes:
        """
        Download the artifact of ``video_id``.

        Returns:
            bytes: The raw artifact.

        Raises:
            ArtifactDownloadError: The content endpoint answered with a fatal status.
            ArtifactNotReadyError: No attempt succeeded within the fetch budget.
        """
        tag = context.tag if context else "[-]"
        budget = context.bound(self.budget) if context else self.budget
        countdown = budget.start(self._clock)
        attempts = 0

        while True:
            attempts += 1
            content = await self._attempt(video_id, fallback_url, context, tag)
            if content:
                logger.info(
                    f"{tag} Downloaded video {video_id} ({len(content)} bytes) "
                    f"on attempt {attempts}"
                )
                return content

            if countdown.expired():
                break
            delay = countdown.next_delay()
            logger.info(
                f"{tag} Video {video_id} not retrievable yet (attempt {attempts}); "
                f"retrying in {delay:g}s"
            )
            await self._sleep(delay)

        logger.error(
            f"{tag} Video {video_id} still not retrievable after {attempts} attempts "
            f"({budget.timeout:g}s)"
        )
        raise ArtifactNotReadyError(NOT_READY_MESSAGE, attempts=attempts)

    async def _attempt(
        self,
        video_id: str,
        fallback_url: str | None,
        context: RunContext | None,
        tag: str,
    ) -> bytes | None:
        """One canonical-then-fallback try; returns None if both miss."""
        try:
            content = await self.provider.download_content(video_id, context)
            if content:
                return content
            logger.warning(f"{tag} Content endpoint returned an empty body for {video_id}")
        except ProviderResponseError as e:
            if e.status_code in self.fatal_statuses:
                logger.error(
                    f"{tag} Video download failed: status={e.status_code} body={e.body[:500]}"
                )
                raise ArtifactDownloadError(e.body, status_code=e.status_code, cause=e) from e
            logger.warning(
                f"{tag} Content endpoint failed: status={e.status_code} body={e.body[:500]}"
            )

        if not fallback_url:
            return None

        try:
            content = await self.provider.download_url(fallback_url, context)
            if content:
                logger.info(f"{tag} Used direct video URL for {video_id}")
                return content
            logger.warning(f"{tag} Direct video URL returned an empty body")
        except ProviderResponseError as e:
            logger.warning(
                f"{tag} Direct video URL failed: status={e.status_code} body={e.body[:500]}"
            )
        return None
