"""
OpenAI SDK client for the prompt director.

Only chat completions go through the SDK. Video jobs use the Videos REST
endpoints via ProviderHttpClient, which shares OPENAI_API_KEY and
OPENAI_BASE_URL with this client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from reelsmith_core.config import settings
from reelsmith_core.domain.exceptions import ConfigurationError

if TYPE_CHECKING:
    from openai import OpenAI


class OpenAIClientSingleton:
    """
    Process-wide chat completions client.

    Usage:
        client = OpenAIClientSingleton.get_instance()
        response = client.chat.completions.create(...)
    """

    _instance: "OpenAI | None" = None

    @classmethod
    def get_instance(cls) -> "OpenAI":
        """
        Return the cached client, building it on first call.

        Raises:
            ConfigurationError: If OPENAI_API_KEY is not configured.
        """
        if cls._instance is None:
            from openai import OpenAI

            api_key = settings.OPENAI_API_KEY
            if not api_key:
                raise ConfigurationError(
                    "OPENAI_API_KEY not configured; the prompt director cannot run."
                )

            cls._instance = OpenAI(api_key=api_key, base_url=settings.OPENAI_BASE_URL)
            logger.info(f"Prompt director client ready (model={settings.OPENAI_PROMPT_MODEL})")

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client so the next call re-reads settings."""
        cls._instance = None


def get_openai_client() -> "OpenAI":
    return OpenAIClientSingleton.get_instance()
