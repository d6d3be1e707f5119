"""
Generation pipeline: submit, poll, fetch, publish.

The pipeline is a small state machine. Each phase has one handler that
performs its side effect, records the matching ledger transition and
returns the next phase:

    SUBMIT  -> ledger generating -> POLL
    POLL    ->                      FETCH
    FETCH   -> ledger uploading  -> PUBLISH
    PUBLISH -> ledger completed  -> DONE

Any ServiceError raised by a handler ends the run: the ledger row is moved
to ``failed`` with the error message as detail and a failure outcome is
returned. ``run`` never returns while the row is still non-terminal.

Usage:
    pipeline = GenerationPipeline(provider, ledger, store, PipelineConfig.from_settings())
    outcome = await pipeline.run(GenerationRequest(video_prompt="..."))
"""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from loguru import logger
from pydantic import BaseModel

from app.generation.config import PipelineConfig
from app.generation.protocols import ArtifactStore, StatusLedger, VideoProvider
from app.generation.schemas import GenerationOutcome, GenerationRequest, PublishedArtifact
from app.generation.services.fetcher import ArtifactFetcher
from app.generation.services.poller import PollLoop
from app.generation.services.publisher import ArtifactPublisher
from app.generation.services.submitter import JobSubmitter, SubmissionParameters
from app.generation.state import VideoStatus, transition
from reelsmith_core.domain.exceptions import LedgerError
from reelsmith_core.runtime.budget import Clock, Sleep
from reelsmith_core.runtime.context import RunContext
from reelsmith_core.runtime.errors import ErrorCode, ServiceError


class Phase(str, Enum):
    """Pipeline phases, in execution order."""

    SUBMIT = "submit"
    POLL = "poll"
    FETCH = "fetch"
    PUBLISH = "publish"
    DONE = "done"


class JobRun(BaseModel):
    """Mutable state of one pipeline run, carried between phases."""

    job_id: str
    prompt: str
    params: SubmissionParameters
    status: VideoStatus = VideoStatus.QUEUED
    video_id: Optional[str] = None
    artifact_url: Optional[str] = None
    content: Optional[bytes] = None
    published: Optional[PublishedArtifact] = None


PhaseHandler = Callable[[JobRun, RunContext], Awaitable[Phase]]


class GenerationPipeline:
    """Drives one generation job from submission to a terminal ledger state."""

    def __init__(
        self,
        provider: VideoProvider,
        ledger: StatusLedger,
        store: ArtifactStore,
        config: PipelineConfig,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ):
        self.config = config
        self.provider = provider
        self.ledger = ledger
        self.submitter = JobSubmitter(
            provider,
            model=config.video_model,
            default_size=config.default_size,
            allowed_sizes=config.allowed_sizes,
            default_seconds=config.default_seconds,
            allowed_seconds=config.allowed_seconds,
        )
        self.poller = PollLoop(provider, config.poll, sleep=sleep, clock=clock)
        self.fetcher = ArtifactFetcher(
            provider,
            config.fetch,
            fatal_statuses=config.fetch_fatal_statuses,
            sleep=sleep,
            clock=clock,
        )
        self.publisher = ArtifactPublisher(
            store, content_type=config.content_type, extension=config.extension
        )
        self._handlers: dict[Phase, PhaseHandler] = {
            Phase.SUBMIT: self._submit,
            Phase.POLL: self._poll,
            Phase.FETCH: self._fetch,
            Phase.PUBLISH: self._publish,
        }

    async def run(
        self,
        request: GenerationRequest,
        context: RunContext | None = None,
    ) -> GenerationOutcome:
        """
        Execute the whole pipeline for one request.

        Args:
            request: Directive, provider parameters and presentation metadata.
            context: Optional request context; a fresh one (with the
                configured deadline) is created if omitted.

        Returns:
            GenerationOutcome: ``completed`` with the published location, or
                ``failed`` with the error recorded in the ledger.
        """
        context = context or RunContext.new(self.config.deadline_seconds)
        params = self.submitter.resolve_parameters(request.size, request.seconds)

        try:
            job_id = await asyncio.to_thread(
                self.ledger.create_job,
                video_prompt=request.video_prompt,
                video_model=params.model,
                video_size=params.size,
                video_seconds=params.seconds,
                recipe_text=request.recipe_text,
                people=request.people,
                region=request.region.value if request.region else None,
            )
        except Exception as e:
            logger.exception(f"{context.tag} Could not create ledger row: {e}")
            error = e if isinstance(e, ServiceError) else LedgerError(
                f"Failed to create ledger row: {e}", cause=e
            )
            return _failure(None, error)

        context = context.with_job(job_id)
        run = JobRun(job_id=job_id, prompt=request.video_prompt, params=params)
        logger.info(f"{context.tag} Starting video generation pipeline")

        phase = Phase.SUBMIT
        try:
            while phase is not Phase.DONE:
                logger.debug(f"{context.tag} Entering phase {phase.value}")
                phase = await self._handlers[phase](run, context)
        except ServiceError as e:
            return await self._fail(run, e, context)
        except asyncio.CancelledError:
            await self._fail(
                run,
                ServiceError(ErrorCode.CANCELLED, "Video generation was cancelled"),
                context,
            )
            raise
        except Exception as e:
            logger.exception(f"{context.tag} Unexpected pipeline error: {e}")
            error = ServiceError(
                ErrorCode.INTERNAL_ERROR,
                str(e) or "Video generation failed",
                message_debug=repr(e),
                cause=e,
            )
            return await self._fail(run, error, context)

        logger.info(f"{context.tag} Video generation completed: {run.published.public_url}")
        return GenerationOutcome(
            id=run.job_id,
            status=run.status.value,
            video_url=run.published.public_url,
            openai_video_id=run.video_id,
            storage_path=run.published.storage_path,
        )

    # ------------------------------------------------------------------
    # Phase handlers
    # ------------------------------------------------------------------

    async def _submit(self, run: JobRun, context: RunContext) -> Phase:
        run.video_id = await self.submitter.submit(run.prompt, run.params, context)
        await self._advance(run, VideoStatus.GENERATING, openai_video_id=run.video_id)
        return Phase.POLL

    async def _poll(self, run: JobRun, context: RunContext) -> Phase:
        result = await self.poller.run(run.video_id, context)
        run.artifact_url = result.artifact_url
        return Phase.FETCH

    async def _fetch(self, run: JobRun, context: RunContext) -> Phase:
        run.content = await self.fetcher.fetch(run.video_id, run.artifact_url, context)
        await self._advance(run, VideoStatus.UPLOADING)
        return Phase.PUBLISH

    async def _publish(self, run: JobRun, context: RunContext) -> Phase:
        published = await self.publisher.publish(run.job_id, run.video_id, run.content, context)
        run.content = None
        await self._advance(
            run,
            VideoStatus.COMPLETED,
            storage_path=published.storage_path,
            video_url=published.public_url,
        )
        run.published = published
        return Phase.DONE

    # ------------------------------------------------------------------
    # Ledger transitions
    # ------------------------------------------------------------------

    async def _advance(self, run: JobRun, target: VideoStatus, **fields) -> None:
        """Validate and persist a status change, then apply it to ``run``."""
        next_status = transition(run.status, target)
        await asyncio.to_thread(self.ledger.update_status, run.job_id, next_status, **fields)
        run.status = next_status

    async def _fail(self, run: JobRun, error: ServiceError, context: RunContext) -> GenerationOutcome:
        logger.error(
            f"{context.tag} Video generation failed in status '{run.status.value}': {error}"
        )
        if not run.status.is_terminal:
            fields = {"error_message": error.message_safe}
            # Failed rows carry the provider handle once one exists
            if run.video_id:
                fields["openai_video_id"] = run.video_id
            try:
                await self._advance(run, VideoStatus.FAILED, **fields)
            except Exception as ledger_error:
                logger.exception(
                    f"{context.tag} Could not record failure in ledger: {ledger_error}"
                )
        return _failure(run.job_id, error)


def _failure(job_id: str | None, error: ServiceError) -> GenerationOutcome:
    return GenerationOutcome(
        id=job_id,
        status=VideoStatus.FAILED.value,
        error=error.message_safe,
        code=error.code,
        retryable=error.retryable,
    )
