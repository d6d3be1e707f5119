"""
Poll loop: wait for a submitted job to reach a terminal provider status.

The provider is queried immediately and then once per interval until it
reports ``completed`` or ``failed``, a query fails, or the poll budget runs
out. A failed query ends the loop; a single flaky poll cannot be told apart
from a dead job.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Optional

from loguru import logger

from app.generation.protocols import VideoProvider
from app.generation.schemas import PollResult
from reelsmith_core.domain.exceptions import (
    GenerationFailedError,
    GenerationTimeoutError,
    PollError,
)
from reelsmith_core.runtime.budget import Clock, Sleep, StageBudget
from reelsmith_core.runtime.context import RunContext
from reelsmith_core.runtime.http_client import ProviderResponseError

ArtifactExtractor = Callable[[dict[str, Any]], Optional[str]]

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
DEFAULT_FAILURE_MESSAGE = "Video generation failed."


def _nested_video_url(payload: dict[str, Any]) -> str | None:
    video = payload.get("video")
    return video.get("url") if isinstance(video, dict) else None


def _output_array_url(payload: dict[str, Any]) -> str | None:
    output = payload.get("output")
    if isinstance(output, list) and output and isinstance(output[0], dict):
        return output[0].get("url")
    return None


def _output_url(payload: dict[str, Any]) -> str | None:
    return payload.get("output_url")


def _bare_url(payload: dict[str, Any]) -> str | None:
    return payload.get("url")


# Priority order; the provider nests the link differently across responses.
ARTIFACT_URL_EXTRACTORS: tuple[ArtifactExtractor, ...] = (
    _nested_video_url,
    _output_array_url,
    _output_url,
    _bare_url,
)


def extract_artifact_url(
    payload: dict[str, Any],
    extractors: tuple[ArtifactExtractor, ...] = ARTIFACT_URL_EXTRACTORS,
) -> str | None:
    """Return the first non-empty artifact URL found by ``extractors``."""
    for extractor in extractors:
        value = extractor(payload)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def extract_failure_message(payload: dict[str, Any]) -> str:
    """Human-readable reason from a ``failed`` status payload."""
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error.strip():
        return error.strip()
    return DEFAULT_FAILURE_MESSAGE


class PollLoop:
    """Repeatedly queries job status until a terminal outcome or timeout."""

    def __init__(
        self,
        provider: VideoProvider,
        budget: StageBudget,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ):
        self.provider = provider
        self.budget = budget
        self._sleep = sleep
        self._clock = clock

    async def run(self, video_id: str, context: RunContext | None = None) -> PollResult:
        """
        Poll ``video_id`` until it completes.

        Returns:
            PollResult: Completed status, the artifact URL (possibly None)
                and the number of queries issued.

        Raises:
            PollError: A status query failed.
            GenerationFailedError: The provider reported the job failed.
            GenerationTimeoutError: The poll budget ran out.
        """
        tag = context.tag if context else "[-]"
        budget = context.bound(self.budget) if context else self.budget
        countdown = budget.start(self._clock)

        polls = 0
        last_status: str | None = None

        while not countdown.expired():
            polls += 1
            try:
                payload = await self.provider.retrieve_video(video_id, context)
            except ProviderResponseError as e:
                logger.error(
                    f"{tag} Video poll failed: status={e.status_code} body={e.body[:500]}"
                )
                raise PollError(e.body, status_code=e.status_code, cause=e) from e

            last_status = str(payload.get("status") or "").lower()

            if last_status == STATUS_COMPLETED:
                artifact_url = extract_artifact_url(payload)
                if artifact_url is None:
                    logger.warning(
                        f"{tag} Video {video_id} completed but no URL reported; "
                        f"will fetch through the content endpoint"
                    )
                logger.info(f"{tag} Video {video_id} completed after {polls} polls")
                return PollResult(status=last_status, artifact_url=artifact_url, polls=polls)

            if last_status == STATUS_FAILED:
                message = extract_failure_message(payload)
                logger.error(f"{tag} Video {video_id} failed at provider: {message}")
                raise GenerationFailedError(message)

            logger.debug(
                f"{tag} Video {video_id} status={last_status or 'unknown'} "
                f"progress={payload.get('progress')} elapsed={countdown.elapsed:.1f}s"
            )
            await self._sleep(countdown.next_delay())

        message = (
            f"Timed out after {budget.timeout:g}s waiting for video generation "
            f"(last status: {last_status or 'unknown'})"
        )
        logger.error(f"{tag} {message}")
        raise GenerationTimeoutError(message, last_status=last_status)
