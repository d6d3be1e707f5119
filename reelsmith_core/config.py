"""
Unified configuration for reelsmith services.

This module provides a single Settings class that consolidates all
environment variables used by the generation pipeline and the API.
Pipeline code never reads these directly; see PipelineConfig.from_settings().
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Unified settings for reelsmith.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables.
    """

    # Service identification
    SERVICE_NAME: str = "reelsmith"
    LOG_LEVEL: str = "INFO"

    # PostgreSQL (status ledger)
    POSTGRES_DSN: str = "host=localhost port=5432 dbname=postgres user=postgres password=postgres"

    # MinIO / S3-compatible object storage
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_SECURE: bool = False
    STORAGE_BUCKET: str = "recipe-videos"
    # Base used to build public URLs; defaults to the MinIO endpoint
    STORAGE_PUBLIC_BASE_URL: str = ""

    # Local storage (development without MinIO)
    USE_LOCAL_STORAGE: bool = False
    LOCAL_STORAGE_PATH: str = "/tmp/reelsmith-storage"

    # OpenAI video provider
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_VIDEO_MODEL: str = "sora-2"
    OPENAI_VIDEO_SIZE: str = "1280x720"
    OPENAI_VIDEO_SECONDS: int = 12
    OPENAI_VIDEO_ALLOWED_SIZES: str = "720x1280,1280x720,1024x1792,1792x1024"
    OPENAI_VIDEO_ALLOWED_SECONDS: str = "4,8,12"
    PROVIDER_HTTP_TIMEOUT_SECONDS: float = 60.0

    # OpenAI prompt director
    OPENAI_PROMPT_MODEL: str = "gpt-4o-mini"
    PROMPT_TEMPERATURE: float = 0.7

    # Pipeline budgets
    VIDEO_POLL_INTERVAL_SECONDS: float = 2.0
    VIDEO_POLL_TIMEOUT_SECONDS: float = 180.0
    VIDEO_FETCH_RETRY_INTERVAL_SECONDS: float = 5.0
    VIDEO_FETCH_TIMEOUT_SECONDS: float = 60.0
    VIDEO_FETCH_FATAL_STATUSES: str = "400,401,403"
    PIPELINE_DEADLINE_SECONDS: float = 300.0

    # Reconciliation
    STALE_JOB_MAX_AGE_MINUTES: int = 30

    # App host/port
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8081

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )

    @property
    def allowed_video_sizes(self) -> tuple[str, ...]:
        return _split_csv(self.OPENAI_VIDEO_ALLOWED_SIZES)

    @property
    def allowed_video_seconds(self) -> tuple[int, ...]:
        return tuple(int(value) for value in _split_csv(self.OPENAI_VIDEO_ALLOWED_SECONDS))

    @property
    def fetch_fatal_statuses(self) -> tuple[int, ...]:
        return tuple(int(value) for value in _split_csv(self.VIDEO_FETCH_FATAL_STATUSES))


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


# Global settings instance
settings = Settings()  # type: ignore
