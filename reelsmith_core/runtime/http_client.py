"""
Shared async HTTP client for calls to the generation provider.

This module provides a pooled HTTP client that injects authorization and
correlation headers and turns every transport failure or non-2xx response
into a ProviderResponseError carrying the status code and raw body.

The client never retries. Whether a failed call is worth repeating is a
decision for the stage that made it (the poll loop does not, the artifact
fetcher does).
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from .context import RunContext


class ProviderResponseError(Exception):
    """A provider call that did not produce a 2xx response.

    Attributes:
        status_code: HTTP status, or None when the request never completed.
        body: Raw response body (or transport error description).
    """

    def __init__(self, status_code: int | None, body: str, cause: Exception | None = None):
        super().__init__(body)
        self.status_code = status_code
        self.body = body
        self.cause = cause

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None

    def __repr__(self) -> str:
        return f"ProviderResponseError(status_code={self.status_code!r}, body={self.body[:200]!r})"


class ProviderHttpClient:
    """Pooled HTTP client for the generation provider.

    Features:
    - Connection pooling via httpx.AsyncClient
    - Bearer authorization for provider endpoints
    - X-Request-Id propagation from the RunContext
    - Per-request timeout

    Example:
        client = ProviderHttpClient("https://api.openai.com/v1", api_key="sk-...")
        async with client:
            response = await client.get("/videos/video_123", context)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        max_connections: int = 100,
        max_keepalive: int = 20,
    ):
        """Initialize the HTTP client.

        Args:
            base_url: Base URL for relative request paths.
            api_key: Bearer token for authenticated requests.
            timeout: Default timeout in seconds.
            max_connections: Maximum total connections in pool.
            max_keepalive: Maximum keepalive connections.
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive,
            keepalive_expiry=30.0,
        )
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=self._limits,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ProviderHttpClient":
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _build_url(self, path: str) -> str:
        """Build full URL from path; absolute URLs pass through unchanged."""
        if path.startswith(("http://", "https://")):
            return path
        path = path.lstrip("/")
        return f"{self.base_url}/{path}"

    async def request(
        self,
        method: str,
        path: str,
        context: RunContext | None = None,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make an HTTP request.

        Args:
            method: HTTP method.
            path: Path relative to base_url, or an absolute URL.
            context: Optional RunContext for correlation headers and log prefix.
            authenticated: Whether to send the bearer token.
            **kwargs: Additional arguments passed to httpx (json, params, ...).

        Returns:
            The successful HTTP response.

        Raises:
            ProviderResponseError: On transport failure or non-2xx status.
        """
        client = await self._get_client()
        url = self._build_url(path)
        tag = context.tag if context else "[-]"

        headers = kwargs.pop("headers", {})
        if context is not None:
            headers.update(context.get_headers())
        if authenticated and self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            response = await client.request(method=method, url=url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{tag} {method} {url} timed out after {self.timeout}s")
            raise ProviderResponseError(
                None, f"Request timed out after {self.timeout}s", cause=e
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{tag} {method} {url} transport error: {type(e).__name__}: {e}")
            raise ProviderResponseError(None, str(e) or type(e).__name__, cause=e) from e

        if response.status_code >= 400:
            body = response.text
            logger.warning(
                f"{tag} {method} {url} failed: status={response.status_code} body={body[:500]}"
            )
            raise ProviderResponseError(response.status_code, body)

        return response

    async def get(self, path: str, context: RunContext | None = None, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, context, **kwargs)

    async def post(self, path: str, context: RunContext | None = None, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, context, **kwargs)
