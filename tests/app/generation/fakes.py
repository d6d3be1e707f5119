from __future__ import annotations
"""
Fake implementations of generation protocols for testing.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from app.generation.protocols import ArtifactStore, StatusLedger, VideoProvider
from app.generation.state import TERMINAL_STATUSES, VideoStatus, can_transition
from reelsmith_core.domain.exceptions import LedgerError


def _next(script: list, index: int):
    """Scripted response at ``index``; the last entry repeats forever."""
    item = script[min(index, len(script) - 1)]
    if isinstance(item, BaseException):
        raise item
    return item


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeVideoProvider(VideoProvider):
    def __init__(
        self,
        create: dict[str, Any] | Exception | None = None,
        statuses: list | None = None,
        content: list | None = None,
        direct: list | None = None,
    ):
        self.create_response = create if create is not None else {"id": "video_123"}
        self.statuses = statuses or [{"id": "video_123", "status": "completed"}]
        self.content = content or [b"mp4-bytes"]
        self.direct = direct or [b"direct-bytes"]

        self.create_calls: list[dict[str, Any]] = []
        self.retrieve_calls = 0
        self.content_calls = 0
        self.direct_calls: list[str] = []

    async def create_video(self, prompt, model, size, seconds, context=None):
        self.create_calls.append(
            {"prompt": prompt, "model": model, "size": size, "seconds": seconds}
        )
        if isinstance(self.create_response, Exception):
            raise self.create_response
        return self.create_response

    async def retrieve_video(self, video_id, context=None):
        self.retrieve_calls += 1
        return _next(self.statuses, self.retrieve_calls - 1)

    async def download_content(self, video_id, context=None):
        self.content_calls += 1
        return _next(self.content, self.content_calls - 1)

    async def download_url(self, url, context=None):
        self.direct_calls.append(url)
        return _next(self.direct, len(self.direct_calls) - 1)


class InMemoryLedger(StatusLedger):
    """Ledger that enforces the same forward-only rule as the SQL guard."""

    def __init__(self, fail_create: bool = False, fail_updates_to: set[VideoStatus] | None = None):
        self.rows: dict[str, dict[str, Any]] = {}
        self.transitions: dict[str, list[str]] = {}
        self.fail_create = fail_create
        self.fail_updates_to = fail_updates_to or set()

    def create_job(self, **fields: Any) -> str:
        if self.fail_create:
            raise RuntimeError("database unavailable")
        job_id = fields.pop("job_id", None) or str(uuid.uuid4())
        self.rows[job_id] = {
            "id": job_id,
            "status": VideoStatus.QUEUED.value,
            "created_at": datetime.now(timezone.utc),
            "completed_at": None,
            "openai_video_id": None,
            "storage_path": None,
            "video_url": None,
            "error_message": None,
            **fields,
        }
        self.transitions[job_id] = [VideoStatus.QUEUED.value]
        return job_id

    def update_status(self, job_id: str, status, **fields: Any) -> None:
        status = VideoStatus(status)
        if status in self.fail_updates_to:
            raise LedgerError(f"write to '{status.value}' failed")
        row = self.rows.get(job_id)
        if row is None or not can_transition(row["status"], status):
            raise LedgerError(f"Ledger rejected transition of job {job_id} to '{status.value}'")
        row.update(fields)
        row["status"] = status.value
        if status is VideoStatus.COMPLETED:
            row["completed_at"] = datetime.now(timezone.utc)
        self.transitions[job_id].append(status.value)

    def get_job(self, job_id: str) -> dict[str, Any] | None:
        row = self.rows.get(job_id)
        return dict(row) if row else None

    def list_jobs(self, limit: int, offset: int = 0) -> list[dict[str, Any]]:
        rows = sorted(self.rows.values(), key=lambda r: r["created_at"], reverse=True)
        return [dict(r) for r in rows[offset : offset + limit]]

    def count_jobs(self) -> int:
        return len(self.rows)

    def delete_job(self, job_id: str) -> bool:
        return self.rows.pop(job_id, None) is not None

    def fail_stale_jobs(self, older_than: datetime, error: str) -> list[str]:
        failed = []
        for job_id, row in self.rows.items():
            if VideoStatus(row["status"]) in TERMINAL_STATUSES:
                continue
            if row["created_at"] < older_than:
                row["status"] = VideoStatus.FAILED.value
                row["error_message"] = error
                failed.append(job_id)
        return failed


class InMemoryArtifactStore(ArtifactStore):
    def __init__(
        self,
        fail_put: Exception | None = None,
        fail_url: Exception | None = None,
        fail_delete: Exception | None = None,
    ):
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.put_calls: list[str] = []
        self.deleted: list[str] = []
        self.fail_put = fail_put
        self.fail_url = fail_url
        self.fail_delete = fail_delete

    def put(self, path: str, content: bytes, content_type: str) -> str:
        self.put_calls.append(path)
        if self.fail_put:
            raise self.fail_put
        self.objects[path] = content
        self.content_types[path] = content_type
        return path

    def public_url(self, path: str) -> str:
        if self.fail_url:
            raise self.fail_url
        return f"https://cdn.test/recipe-videos/{path}"

    def delete(self, path: str) -> None:
        if self.fail_delete:
            raise self.fail_delete
        self.objects.pop(path, None)
        self.deleted.append(path)
