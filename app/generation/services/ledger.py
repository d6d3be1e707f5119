"""
VideoLedgerService: PostgreSQL status ledger for generation jobs.

This service handles:
- Creating one row per pipeline run
- Forward-only status updates, guarded in SQL so concurrent writers can
  never regress a row
- History reads and administrative deletes for the presentation layer
- Failing rows abandoned by a crashed process (reconciliation)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from app.generation.state import TERMINAL_STATUSES, VideoStatus, allowed_predecessors
from reelsmith_core.domain.exceptions import LedgerError
from reelsmith_core.infrastructure.postgres import get_db_connection

TABLE = "video_generations"

COLUMNS = (
    "id",
    "status",
    "created_at",
    "completed_at",
    "video_prompt",
    "video_model",
    "video_size",
    "video_seconds",
    "openai_video_id",
    "storage_path",
    "video_url",
    "error_message",
    "recipe_text",
    "people",
    "region",
)

# Fields the pipeline may write alongside a status change
UPDATABLE_FIELDS = frozenset({"openai_video_id", "storage_path", "video_url", "error_message"})

CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id TEXT PRIMARY KEY,
    status TEXT NOT NULL DEFAULT 'queued'
        CHECK (status IN ('queued', 'generating', 'uploading', 'completed', 'failed')),
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    completed_at TIMESTAMPTZ,
    video_prompt TEXT NOT NULL,
    video_model TEXT,
    video_size TEXT,
    video_seconds INTEGER,
    openai_video_id TEXT UNIQUE,
    storage_path TEXT,
    video_url TEXT,
    error_message TEXT,
    recipe_text TEXT,
    people TEXT,
    region TEXT
);
CREATE INDEX IF NOT EXISTS {TABLE}_created_at_idx ON {TABLE} (created_at DESC);
CREATE INDEX IF NOT EXISTS {TABLE}_status_idx ON {TABLE} (status);
"""


class VideoLedgerService:
    """
    Service for tracking video generation jobs in PostgreSQL.

    Usage:
        ledger = VideoLedgerService()
        job_id = ledger.create_job(video_prompt="...", video_model="sora-2")
        ledger.update_status(job_id, VideoStatus.GENERATING, openai_video_id="video_abc")
        ledger.update_status(job_id, VideoStatus.FAILED, error_message="quota exceeded")
    """

    def ensure_table(self) -> None:
        """Create the ledger table and its indexes if they do not exist."""
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(CREATE_TABLE_SQL)
            conn.commit()

        logger.info(f"Ensured ledger table '{TABLE}'")

    def create_job(
        self,
        video_prompt: str,
        video_model: str | None = None,
        video_size: str | None = None,
        video_seconds: int | None = None,
        recipe_text: str | None = None,
        people: str | None = None,
        region: str | None = None,
        job_id: str | None = None,
    ) -> str:
        """
        Create a new ``queued`` job record.

        Args:
            video_prompt: Directive sent to the provider.
            video_model: Provider model.
            video_size: Resolved frame size.
            video_seconds: Resolved duration.
            recipe_text: Optional presentation metadata.
            people: Optional presentation metadata.
            region: Optional presentation metadata.
            job_id: Optional job ID (generates one if not provided).

        Returns:
            str: The job ID (provided or generated).
        """
        if job_id is None:
            job_id = str(uuid.uuid4())

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO {TABLE}
                (id, status, created_at, video_prompt, video_model, video_size,
                 video_seconds, recipe_text, people, region)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    job_id,
                    VideoStatus.QUEUED.value,
                    datetime.now(timezone.utc),
                    video_prompt,
                    video_model,
                    video_size,
                    video_seconds,
                    recipe_text,
                    people,
                    region,
                ),
            )
            conn.commit()

        logger.info(f"Created generation job {job_id}")
        return job_id

    def update_status(self, job_id: str, status: VideoStatus | str, **fields: Any) -> None:
        """
        Move a job to ``status`` and persist accompanying fields.

        The UPDATE only matches rows whose current status may legally move
        to ``status``; a regression, a write to a terminal row or a missing
        row all affect zero rows and raise.

        Args:
            job_id: The job ID.
            status: Target status.
            **fields: Any of openai_video_id, storage_path, video_url, error_message.

        Raises:
            LedgerError: If the row is missing or the transition is not allowed.
        """
        status = VideoStatus(status)
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported ledger fields: {sorted(unknown)}")

        assignments = ["status = %s"]
        params: list[Any] = [status.value]
        for name in sorted(fields):
            assignments.append(f"{name} = %s")
            params.append(fields[name])
        if status is VideoStatus.COMPLETED:
            assignments.append("completed_at = %s")
            params.append(datetime.now(timezone.utc))

        predecessors = [s.value for s in allowed_predecessors(status)]
        params.extend([job_id, predecessors])

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                UPDATE {TABLE}
                SET {", ".join(assignments)}
                WHERE id = %s AND status = ANY(%s)
                """,
                tuple(params),
            )
            updated = cursor.rowcount
            conn.commit()

        if updated != 1:
            raise LedgerError(
                f"Ledger rejected transition of job {job_id} to '{status.value}'"
            )

        if status is VideoStatus.FAILED:
            logger.error(f"Failed job {job_id}: {fields.get('error_message')}")
        else:
            logger.debug(f"Updated job {job_id}: status={status.value}")

    def complete_job(self, job_id: str, storage_path: str, video_url: str) -> None:
        """Mark a job completed with its published artifact location."""
        self.update_status(
            job_id, VideoStatus.COMPLETED, storage_path=storage_path, video_url=video_url
        )

    def fail_job(self, job_id: str, error: str) -> None:
        """Mark a job failed with a failure detail."""
        self.update_status(job_id, VideoStatus.FAILED, error_message=error)

    def get_job(self, job_id: str) -> dict[str, Any] | None:
        """
        Get job details by ID.

        Returns:
            dict: Job details if found, None otherwise.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {', '.join(COLUMNS)} FROM {TABLE} WHERE id = %s",
                (job_id,),
            )
            row = cursor.fetchone()

        return self._row_to_dict(row)

    def list_jobs(self, limit: int, offset: int = 0) -> list[dict[str, Any]]:
        """Return jobs newest first."""
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {', '.join(COLUMNS)}
                FROM {TABLE}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
                """,
                (limit, offset),
            )
            rows = cursor.fetchall()

        return [self._row_to_dict(row) for row in rows]

    def count_jobs(self) -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT COUNT(*) FROM {TABLE}")
            row = cursor.fetchone()

        return int(row[0]) if row else 0

    def delete_job(self, job_id: str) -> bool:
        """
        Delete a job row. Administrative only; the pipeline never deletes.

        Returns:
            bool: True if a row was removed.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"DELETE FROM {TABLE} WHERE id = %s", (job_id,))
            deleted = cursor.rowcount
            conn.commit()

        if deleted:
            logger.info(f"Deleted generation job {job_id}")
        return deleted > 0

    def fail_stale_jobs(self, older_than: datetime, error: str) -> list[str]:
        """
        Fail every non-terminal job created before ``older_than``.

        Returns:
            list[str]: IDs of the jobs that were failed.
        """
        open_statuses = [s.value for s in VideoStatus if s not in TERMINAL_STATUSES]

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                UPDATE {TABLE}
                SET status = %s, error_message = %s
                WHERE status = ANY(%s) AND created_at < %s
                RETURNING id
                """,
                (VideoStatus.FAILED.value, error, open_statuses, older_than),
            )
            rows = cursor.fetchall()
            conn.commit()

        job_ids = [row[0] for row in rows]
        if job_ids:
            logger.warning(f"Failed {len(job_ids)} stale jobs: {job_ids}")
        return job_ids

    @staticmethod
    def _row_to_dict(row: tuple | None) -> dict[str, Any] | None:
        if not row:
            return None
        return dict(zip(COLUMNS, row))
