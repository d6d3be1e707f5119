"""
Artifact publisher: upload video bytes and resolve their public URL.

Objects are keyed ``<job id>/<video id>.<ext>``, so publishing the same job
twice overwrites one object instead of leaving a duplicate behind.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from app.generation.protocols import ArtifactStore
from app.generation.schemas import PublishedArtifact
from reelsmith_core.domain.exceptions import StorageError
from reelsmith_core.runtime.context import RunContext
from reelsmith_core.runtime.errors import ErrorCode


def artifact_path(job_id: str, video_id: str, extension: str = "mp4") -> str:
    """Deterministic storage key for a job's artifact."""
    return f"{job_id}/{video_id}.{extension}"


class ArtifactPublisher:
    """Writes artifacts to an ArtifactStore off the event loop."""

    def __init__(self, store: ArtifactStore, content_type: str = "video/mp4", extension: str = "mp4"):
        self.store = store
        self.content_type = content_type
        self.extension = extension

    async def publish(
        self,
        job_id: str,
        video_id: str,
        content: bytes,
        context: RunContext | None = None,
    ) -> PublishedArtifact:
        """
        Upload ``content`` and return where it lives.

        Raises:
            StorageError: Upload or public URL resolution failed.
        """
        tag = context.tag if context else "[-]"
        path = artifact_path(job_id, video_id, self.extension)

        try:
            storage_path = await asyncio.to_thread(self.store.put, path, content, self.content_type)
        except Exception as e:
            logger.error(f"{tag} Upload of {path} failed: {type(e).__name__}: {e}")
            raise StorageError(str(e) or type(e).__name__, cause=e) from e

        try:
            public_url = self.store.public_url(storage_path)
        except Exception as e:
            logger.error(f"{tag} Could not resolve public URL for {storage_path}: {e}")
            raise StorageError(
                str(e) or type(e).__name__, code=ErrorCode.STORAGE_URL_ERROR, cause=e
            ) from e

        logger.info(f"{tag} Published {storage_path} -> {public_url}")
        return PublishedArtifact(storage_path=storage_path, public_url=public_url)
