"""
Pipeline configuration.

Settings are resolved once into a frozen PipelineConfig that is passed to
the pipeline constructor; pipeline stages never read the environment.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from reelsmith_core.config import Settings, settings as default_settings
from reelsmith_core.runtime.budget import StageBudget

VIDEO_CONTENT_TYPE = "video/mp4"
VIDEO_EXTENSION = "mp4"


class PipelineConfig(BaseModel):
    """Everything the generation pipeline needs to know about its environment."""

    video_model: str = "sora-2"
    default_size: str = "1280x720"
    allowed_sizes: tuple[str, ...] = ("720x1280", "1280x720", "1024x1792", "1792x1024")
    default_seconds: int = 12
    allowed_seconds: tuple[int, ...] = (4, 8, 12)

    poll: StageBudget = Field(default_factory=lambda: StageBudget(interval=2.0, timeout=180.0))
    fetch: StageBudget = Field(default_factory=lambda: StageBudget(interval=5.0, timeout=60.0))
    fetch_fatal_statuses: tuple[int, ...] = (400, 401, 403)
    deadline_seconds: float | None = 300.0

    content_type: str = VIDEO_CONTENT_TYPE
    extension: str = VIDEO_EXTENSION

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _defaults_are_allowed(self) -> "PipelineConfig":
        if self.default_size not in self.allowed_sizes:
            raise ValueError(f"default_size {self.default_size!r} is not in allowed_sizes")
        if self.default_seconds not in self.allowed_seconds:
            raise ValueError(f"default_seconds {self.default_seconds!r} is not in allowed_seconds")
        return self

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "PipelineConfig":
        """Resolve a config from application settings."""
        s = source or default_settings
        return cls(
            video_model=s.OPENAI_VIDEO_MODEL,
            default_size=s.OPENAI_VIDEO_SIZE,
            allowed_sizes=s.allowed_video_sizes,
            default_seconds=s.OPENAI_VIDEO_SECONDS,
            allowed_seconds=s.allowed_video_seconds,
            poll=StageBudget(
                interval=s.VIDEO_POLL_INTERVAL_SECONDS,
                timeout=s.VIDEO_POLL_TIMEOUT_SECONDS,
            ),
            fetch=StageBudget(
                interval=s.VIDEO_FETCH_RETRY_INTERVAL_SECONDS,
                timeout=s.VIDEO_FETCH_TIMEOUT_SECONDS,
            ),
            fetch_fatal_statuses=s.fetch_fatal_statuses,
            deadline_seconds=s.PIPELINE_DEADLINE_SECONDS or None,
        )
