"""
Generation module factory.

This module provides factory functions to create instances of generation
services, handling dependency injection and configuration.
"""

from __future__ import annotations

from functools import lru_cache
from typing import AsyncIterator

from app.generation.config import PipelineConfig
from app.generation.protocols import ArtifactStore
from app.generation.services.history import GenerationHistoryService
from app.generation.services.ledger import VideoLedgerService
from app.generation.services.pipeline import GenerationPipeline
from app.generation.services.prompt_director import PromptDirector
from app.generation.services.provider import get_video_provider
from app.generation.services.storage import get_artifact_store


@lru_cache()
def get_pipeline_config() -> PipelineConfig:
    """Get the pipeline configuration built from settings."""
    return PipelineConfig.from_settings()


@lru_cache()
def get_ledger() -> VideoLedgerService:
    """Get the status ledger service instance."""
    return VideoLedgerService()


@lru_cache()
def get_store() -> ArtifactStore:
    """Get the artifact store for the configured backend."""
    return get_artifact_store()


def get_prompt_director() -> PromptDirector:
    return PromptDirector()


def get_history_service() -> GenerationHistoryService:
    """Get the history service wired to the shared ledger and store."""
    return GenerationHistoryService(ledger=get_ledger(), store=get_store())


def get_pipeline() -> GenerationPipeline:
    """
    Get a generation pipeline instance.

    Wires up dependencies: VideoProvider, StatusLedger, ArtifactStore.
    Each pipeline owns its provider HTTP client; close it with
    ``await pipeline.provider.close()``.

    Raises:
        ConfigurationError: If the provider API key is missing.
    """
    return GenerationPipeline(
        provider=get_video_provider(),
        ledger=get_ledger(),
        store=get_store(),
        config=get_pipeline_config(),
    )


async def pipeline_dependency() -> AsyncIterator[GenerationPipeline]:
    """FastAPI dependency yielding a pipeline and closing its HTTP client afterwards."""
    pipeline = get_pipeline()
    try:
        yield pipeline
    finally:
        await pipeline.provider.close()
