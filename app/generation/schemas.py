"""
Pydantic schemas for the generation module.

This module contains the request/response models for the video API and the
in-process result types passed between pipeline stages.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, Field, field_validator


# ==============================================================================
# REQUEST SCHEMAS
# ==============================================================================


class Region(str, Enum):
    """Audience region used to flavor the video directive."""

    US = "US"
    EUROPE = "Europe"
    ASIA = "Asia"


class GenerationRequest(BaseModel):
    """A request to generate one video.

    ``size`` and ``seconds`` are free-form here; values of the wrong type
    are dropped, and values outside the configured allow-lists are replaced
    by defaults at submission.
    """

    video_prompt: str = Field(..., min_length=1)
    size: Optional[str] = None
    seconds: Optional[int] = None

    # Presentation metadata stored alongside the ledger row
    recipe_text: Optional[str] = None
    people: Optional[str] = None
    region: Optional[Region] = None

    @field_validator("video_prompt")
    @classmethod
    def _strip_prompt(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("video_prompt must not be blank")
        return value

    @field_validator("size", mode="before")
    @classmethod
    def _loose_size(cls, value: Any) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        logger.warning(f"Ignoring non-text video size {value!r}")
        return None

    @field_validator("seconds", mode="before")
    @classmethod
    def _loose_seconds(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        logger.warning(f"Ignoring unparseable video duration {value!r}")
        return None


class PromptRequest(BaseModel):
    """Request body for composing a video directive from a recipe."""

    recipe_text: str = Field(..., min_length=1)
    people: str = Field(..., min_length=1)
    region: Region


class PromptResponse(BaseModel):
    video_prompt: str


# ==============================================================================
# PIPELINE RESULT SCHEMAS
# ==============================================================================


class PollResult(BaseModel):
    """Outcome of a successful poll loop."""

    status: str
    artifact_url: Optional[str] = None
    polls: int


class PublishedArtifact(BaseModel):
    """Where a published artifact lives."""

    storage_path: str
    public_url: str


class GenerationOutcome(BaseModel):
    """Terminal result of one pipeline run.

    On success ``video_url``, ``openai_video_id`` and ``storage_path`` are
    set; on failure ``error``, ``code`` and ``retryable`` are.
    """

    id: Optional[str] = None
    status: str
    video_url: Optional[str] = None
    openai_video_id: Optional[str] = None
    storage_path: Optional[str] = None
    error: Optional[str] = None
    code: Optional[str] = None
    retryable: Optional[bool] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "completed"

    def to_payload(self) -> dict[str, Any]:
        """Caller-facing payload: success and failure carry different keys."""
        if self.succeeded:
            return {
                "id": self.id,
                "status": self.status,
                "video_url": self.video_url,
                "openai_video_id": self.openai_video_id,
                "storage_path": self.storage_path,
            }
        return {
            "id": self.id,
            "status": self.status,
            "error": self.error,
            "code": self.code,
            "retryable": self.retryable,
        }


# ==============================================================================
# HISTORY SCHEMAS
# ==============================================================================


class GenerationRecord(BaseModel):
    """One row of the status ledger."""

    id: str
    status: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    video_prompt: str
    video_model: Optional[str] = None
    video_size: Optional[str] = None
    video_seconds: Optional[int] = None
    openai_video_id: Optional[str] = None
    storage_path: Optional[str] = None
    video_url: Optional[str] = None
    error_message: Optional[str] = None
    recipe_text: Optional[str] = None
    people: Optional[str] = None
    region: Optional[str] = None


class HistoryResponse(BaseModel):
    history: list[GenerationRecord]
    total: int


class DeleteResponse(BaseModel):
    id: str
    deleted: bool
    storage_path: Optional[str] = None
