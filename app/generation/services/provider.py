"""
OpenAI Videos API adapter.

Async task pattern:
1. POST /videos                -> create job, returns {"id": ...}
2. GET  /videos/{id}           -> status payload
3. GET  /videos/{id}/content   -> finished MP4 bytes

Errors are not interpreted here; every failure surfaces as a
ProviderResponseError and the calling stage decides what it means.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from reelsmith_core.config import settings
from reelsmith_core.domain.exceptions import ConfigurationError
from reelsmith_core.runtime.context import RunContext
from reelsmith_core.runtime.http_client import ProviderHttpClient, ProviderResponseError


class OpenAIVideoProvider:
    """VideoProvider backed by the OpenAI Videos REST endpoints."""

    def __init__(self, http_client: ProviderHttpClient):
        self._http = http_client

    async def create_video(
        self,
        prompt: str,
        model: str,
        size: str,
        seconds: int,
        context: RunContext | None = None,
    ) -> dict[str, Any]:
        response = await self._http.post(
            "/videos",
            context,
            json={
                "model": model,
                "prompt": prompt,
                "size": size,
                # API expects enumerated seconds as a string
                "seconds": str(seconds),
            },
        )
        return _json_body(response)

    async def retrieve_video(self, video_id: str, context: RunContext | None = None) -> dict[str, Any]:
        response = await self._http.get(f"/videos/{video_id}", context)
        return _json_body(response)

    async def download_content(self, video_id: str, context: RunContext | None = None) -> bytes:
        response = await self._http.get(f"/videos/{video_id}/content", context)
        return response.content

    async def download_url(self, url: str, context: RunContext | None = None) -> bytes:
        # Direct links are pre-signed; the provider token must not leak to them
        response = await self._http.get(url, context, authenticated=False)
        return response.content

    async def close(self) -> None:
        await self._http.close()


def _json_body(response) -> dict[str, Any]:
    """Decode a JSON object body; anything else is a provider error."""
    try:
        payload = response.json()
    except ValueError as e:
        raise ProviderResponseError(response.status_code, response.text, cause=e) from e
    if not isinstance(payload, dict):
        raise ProviderResponseError(response.status_code, response.text)
    return payload


def get_video_provider() -> OpenAIVideoProvider:
    """
    Build the OpenAI video provider from settings.

    Raises:
        ConfigurationError: If OPENAI_API_KEY is missing.
    """
    if not settings.OPENAI_API_KEY:
        raise ConfigurationError("OPENAI_API_KEY is missing")

    logger.debug(f"Using OpenAI video provider at {settings.OPENAI_BASE_URL}")
    return OpenAIVideoProvider(
        ProviderHttpClient(
            base_url=settings.OPENAI_BASE_URL,
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.PROVIDER_HTTP_TIMEOUT_SECONDS,
        )
    )
