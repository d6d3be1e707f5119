"""
History and administration of generation records.

Read-side helpers for the presentation layer plus the administrative
delete, which removes the stored video before the ledger row so a row is
never dropped while its object still exists.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from app.generation.protocols import ArtifactStore
from app.generation.services.ledger import VideoLedgerService
from reelsmith_core.domain.exceptions import JobNotFoundError, StorageError

DEFAULT_PAGE_SIZE = 5
MAX_PAGE_SIZE = 50


def clamp_page(limit: int | None, page: int | None) -> tuple[int, int]:
    """Normalize pagination input to (limit, page)."""
    limit = limit or DEFAULT_PAGE_SIZE
    limit = max(1, min(MAX_PAGE_SIZE, limit))
    page = max(1, page or 1)
    return limit, page


class GenerationHistoryService:
    """Lists, reads and deletes generation records."""

    def __init__(self, ledger: VideoLedgerService, store: ArtifactStore):
        self.ledger = ledger
        self.store = store

    def list_history(self, limit: int | None = None, page: int | None = None) -> dict[str, Any]:
        """
        Return one page of history, newest first.

        Returns:
            dict: ``{"history": [...], "total": int}``
        """
        limit, page = clamp_page(limit, page)
        total = self.ledger.count_jobs()
        rows = self.ledger.list_jobs(limit=limit, offset=(page - 1) * limit)
        return {"history": rows, "total": total}

    def get_generation(self, job_id: str) -> dict[str, Any]:
        row = self.ledger.get_job(job_id)
        if row is None:
            raise JobNotFoundError(job_id)
        return row

    def delete_generation(self, job_id: str) -> dict[str, Any]:
        """
        Delete a record and its stored video.

        Raises:
            JobNotFoundError: No such record.
            StorageError: The stored video could not be removed; the row is kept.
        """
        row = self.get_generation(job_id)
        storage_path = row.get("storage_path")

        if storage_path:
            try:
                self.store.delete(storage_path)
            except Exception as e:
                logger.error(f"[{job_id}] Failed to delete stored video {storage_path}: {e}")
                raise StorageError(str(e) or type(e).__name__, cause=e) from e

        deleted = self.ledger.delete_job(job_id)
        if not deleted:
            raise JobNotFoundError(job_id)

        return {"id": job_id, "deleted": True, "storage_path": storage_path}
