"""
Job submission: the single creation call to the video provider.

Submission is never retried. A rejection here is almost always a malformed
prompt, a moderation refusal or an exhausted quota, none of which get
better by asking again.
"""

from __future__ import annotations

from loguru import logger
from pydantic import BaseModel

from app.generation.protocols import VideoProvider
from reelsmith_core.domain.exceptions import ProviderContractError, SubmissionError
from reelsmith_core.runtime.context import RunContext
from reelsmith_core.runtime.http_client import ProviderResponseError

MISSING_HANDLE_MESSAGE = "Provider did not return a video id"


class SubmissionParameters(BaseModel):
    """Provider parameters after allow-list resolution."""

    model: str
    size: str
    seconds: int

    model_config = {"frozen": True}


class JobSubmitter:
    """Validates provider parameters and creates the remote job."""

    def __init__(
        self,
        provider: VideoProvider,
        model: str,
        default_size: str,
        allowed_sizes: tuple[str, ...],
        default_seconds: int,
        allowed_seconds: tuple[int, ...],
    ):
        self.provider = provider
        self.model = model
        self.default_size = default_size
        self.allowed_sizes = allowed_sizes
        self.default_seconds = default_seconds
        self.allowed_seconds = allowed_seconds

    def resolve_size(self, size: str | None) -> str:
        if size is None:
            return self.default_size
        if size not in self.allowed_sizes:
            logger.warning(f"Unsupported video size {size!r}; using {self.default_size}")
            return self.default_size
        return size

    def resolve_seconds(self, seconds: int | None) -> int:
        if seconds is None:
            return self.default_seconds
        if seconds not in self.allowed_seconds:
            logger.warning(f"Unsupported video duration {seconds!r}s; using {self.default_seconds}s")
            return self.default_seconds
        return seconds

    def resolve_parameters(self, size: str | None, seconds: int | None) -> SubmissionParameters:
        """Replace values outside the allow-lists with configured defaults."""
        return SubmissionParameters(
            model=self.model,
            size=self.resolve_size(size),
            seconds=self.resolve_seconds(seconds),
        )

    async def submit(
        self,
        prompt: str,
        params: SubmissionParameters,
        context: RunContext | None = None,
    ) -> str:
        """
        Create the remote job and return its handle.

        Raises:
            SubmissionError: Transport failure or non-2xx; message is the raw body.
            ProviderContractError: 2xx response without a job id.
        """
        tag = context.tag if context else "[-]"
        logger.info(
            f"{tag} Submitting video job (model={params.model}, size={params.size}, "
            f"seconds={params.seconds})"
        )

        try:
            payload = await self.provider.create_video(
                prompt=prompt,
                model=params.model,
                size=params.size,
                seconds=params.seconds,
                context=context,
            )
        except ProviderResponseError as e:
            logger.error(
                f"{tag} Video create failed: status={e.status_code} body={e.body[:500]}"
            )
            raise SubmissionError(e.body, status_code=e.status_code, cause=e) from e

        handle = payload.get("id")
        if not handle:
            logger.error(f"{tag} Video create returned no id: {payload}")
            raise ProviderContractError(MISSING_HANDLE_MESSAGE)

        logger.info(f"{tag} Video job created: {handle}")
        return str(handle)
