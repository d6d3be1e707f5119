from __future__ import annotations
"""
Protocols for the generation module.

These protocols define the collaborators the pipeline depends on, allowing
the OpenAI provider, the MinIO store and the PostgreSQL ledger to be
swapped for local or fake implementations.
"""

from typing import Any, Protocol, runtime_checkable

from app.generation.state import VideoStatus
from reelsmith_core.runtime.context import RunContext


@runtime_checkable
class VideoProvider(Protocol):
    """Remote video generation service.

    Every method raises ProviderResponseError on transport failure or a
    non-2xx response.
    """

    async def create_video(
        self,
        prompt: str,
        model: str,
        size: str,
        seconds: int,
        context: RunContext | None = None,
    ) -> dict[str, Any]:
        """Submit a generation job and return the provider's JSON payload."""
        ...

    async def retrieve_video(self, video_id: str, context: RunContext | None = None) -> dict[str, Any]:
        """Return the current status payload of a job."""
        ...

    async def download_content(self, video_id: str, context: RunContext | None = None) -> bytes:
        """Fetch the finished artifact through the canonical content endpoint."""
        ...

    async def download_url(self, url: str, context: RunContext | None = None) -> bytes:
        """Fetch an artifact from a direct URL reported by the provider."""
        ...


@runtime_checkable
class ArtifactStore(Protocol):
    """Durable object storage for published artifacts."""

    def put(self, path: str, content: bytes, content_type: str) -> str:
        """
        Store content at ``path``, overwriting any existing object.

        Returns:
            str: The storage path.
        """
        ...

    def public_url(self, path: str) -> str:
        """Resolve the publicly addressable URL of a stored object."""
        ...

    def delete(self, path: str) -> None:
        """Remove a stored object."""
        ...


@runtime_checkable
class StatusLedger(Protocol):
    """Durable per-job status record."""

    def create_job(self, **fields: Any) -> str:
        """Insert a new ``queued`` row and return its id."""
        ...

    def update_status(self, job_id: str, status: VideoStatus, **fields: Any) -> None:
        """Move a job to ``status`` and persist the accompanying fields."""
        ...

    def get_job(self, job_id: str) -> dict[str, Any] | None:
        """Return the row for ``job_id`` or None."""
        ...
