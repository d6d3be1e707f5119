"""
Video generation API routes.

This module provides endpoints for:
- Composing a video prompt from a recipe
- Running a generation job to completion
- Browsing and deleting past generations
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from loguru import logger

from app.generation.factory import (
    get_history_service,
    get_prompt_director,
    pipeline_dependency,
)
from app.generation.schemas import (
    DeleteResponse,
    GenerationRecord,
    GenerationRequest,
    HistoryResponse,
    PromptRequest,
    PromptResponse,
)
from app.generation.services.history import DEFAULT_PAGE_SIZE, GenerationHistoryService
from app.generation.services.pipeline import GenerationPipeline
from app.generation.services.prompt_director import PromptDirector
from reelsmith_core.domain.exceptions import JobNotFoundError, PromptError, StorageError
from reelsmith_core.runtime.context import RunContext

router = APIRouter()


# ==============================================================================
# GENERATION ENDPOINTS
# ==============================================================================


@router.post("/prompt", response_model=PromptResponse, summary="Compose a video prompt")
async def compose_prompt(
    body: PromptRequest,
    director: PromptDirector = Depends(get_prompt_director),
):
    """
    Turn a recipe into a video directive.

    The directive can be edited by the user before it is submitted to
    ``POST /videos``.
    """
    try:
        video_prompt = await director.compose_async(body.recipe_text, body.people, body.region)
    except PromptError as e:
        raise HTTPException(status_code=500, detail=e.message_safe)

    return PromptResponse(video_prompt=video_prompt)


@router.post("", summary="Generate a video")
async def generate_video(
    body: GenerationRequest,
    pipeline: GenerationPipeline = Depends(pipeline_dependency),
):
    """
    Run one generation job to a terminal state.

    Returns 200 with the published location on success. Failures return the
    ledger's error detail with 504 when retrying later is sensible and 500
    otherwise.
    """
    context = RunContext.new(pipeline.config.deadline_seconds)
    logger.info(f"{context.tag} Received video generation request")

    outcome = await pipeline.run(body, context)

    if outcome.succeeded:
        status_code = 200
    elif outcome.retryable:
        status_code = 504
    else:
        status_code = 500

    return JSONResponse(status_code=status_code, content=outcome.to_payload())


# ==============================================================================
# HISTORY ENDPOINTS
# ==============================================================================


@router.get("/history", response_model=HistoryResponse, summary="List past generations")
def list_history(
    response: Response,
    limit: int = Query(DEFAULT_PAGE_SIZE, description="Page size (clamped to 1..50)"),
    page: int = Query(1, description="1-based page number"),
    history: GenerationHistoryService = Depends(get_history_service),
):
    """List generations, newest first."""
    response.headers["Cache-Control"] = "no-store"
    return history.list_history(limit=limit, page=page)


@router.get("/{job_id}", response_model=GenerationRecord, summary="Get one generation")
def get_generation(
    job_id: str,
    history: GenerationHistoryService = Depends(get_history_service),
):
    try:
        return history.get_generation(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message_safe)


@router.delete("/{job_id}", response_model=DeleteResponse, summary="Delete a generation")
def delete_generation(
    job_id: str,
    history: GenerationHistoryService = Depends(get_history_service),
):
    """
    Delete a generation and its stored video.

    The stored object is removed first; if that fails the record is kept.
    """
    try:
        return history.delete_generation(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message_safe)
    except StorageError as e:
        raise HTTPException(status_code=502, detail=e.message_safe)
