"""Unit tests for the generation history service."""

from datetime import datetime, timedelta, timezone

import pytest

from app.generation.services.history import GenerationHistoryService, clamp_page
from app.generation.state import VideoStatus
from reelsmith_core.domain.exceptions import JobNotFoundError, StorageError
from tests.app.generation.fakes import InMemoryArtifactStore, InMemoryLedger


class TestClampPage:
    @pytest.mark.parametrize(
        "limit,page,expected",
        [
            (None, None, (5, 1)),
            (10, 3, (10, 3)),
            (500, 1, (50, 1)),
            (-3, 1, (1, 1)),
            (5, 0, (5, 1)),
            (5, -2, (5, 1)),
        ],
    )
    def test_clamps(self, limit, page, expected):
        assert clamp_page(limit, page) == expected


class TestListHistory:
    def test_returns_newest_first_with_total(self, ledger, store):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for i in range(7):
            job_id = ledger.create_job(video_prompt=f"prompt {i}")
            ledger.rows[job_id]["created_at"] = base + timedelta(minutes=i)

        result = GenerationHistoryService(ledger, store).list_history(limit=5, page=1)

        assert result["total"] == 7
        assert [row["video_prompt"] for row in result["history"]] == [
            "prompt 6",
            "prompt 5",
            "prompt 4",
            "prompt 3",
            "prompt 2",
        ]

    def test_second_page(self, ledger, store):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for i in range(7):
            job_id = ledger.create_job(video_prompt=f"prompt {i}")
            ledger.rows[job_id]["created_at"] = base + timedelta(minutes=i)

        result = GenerationHistoryService(ledger, store).list_history(limit=5, page=2)

        assert [row["video_prompt"] for row in result["history"]] == ["prompt 1", "prompt 0"]


class TestGetGeneration:
    def test_returns_row(self, ledger, store):
        job_id = ledger.create_job(video_prompt="x")

        row = GenerationHistoryService(ledger, store).get_generation(job_id)

        assert row["id"] == job_id

    def test_missing_raises(self, ledger, store):
        with pytest.raises(JobNotFoundError):
            GenerationHistoryService(ledger, store).get_generation("missing")


class TestDeleteGeneration:
    def test_deletes_object_then_row(self, ledger, store):
        job_id = _completed_job(ledger, store)

        result = GenerationHistoryService(ledger, store).delete_generation(job_id)

        assert result == {"id": job_id, "deleted": True, "storage_path": f"{job_id}/video_abc.mp4"}
        assert store.deleted == [f"{job_id}/video_abc.mp4"]
        assert job_id not in ledger.rows

    def test_storage_failure_keeps_row(self, ledger):
        store = InMemoryArtifactStore(fail_delete=OSError("bucket unreachable"))
        job_id = _completed_job(ledger, store)

        with pytest.raises(StorageError):
            GenerationHistoryService(ledger, store).delete_generation(job_id)

        assert job_id in ledger.rows

    def test_row_without_object(self, ledger, store):
        job_id = ledger.create_job(video_prompt="x")
        ledger.update_status(job_id, VideoStatus.FAILED, error_message="bad prompt")

        result = GenerationHistoryService(ledger, store).delete_generation(job_id)

        assert result["storage_path"] is None
        assert store.deleted == []

    def test_missing_raises(self, ledger, store):
        with pytest.raises(JobNotFoundError):
            GenerationHistoryService(ledger, store).delete_generation("missing")


def _completed_job(ledger, store) -> str:
    job_id = ledger.create_job(video_prompt="x")
    path = f"{job_id}/video_abc.mp4"
    store.objects[path] = b"video"
    ledger.update_status(job_id, VideoStatus.GENERATING, openai_video_id="video_abc")
    ledger.update_status(job_id, VideoStatus.UPLOADING)
    ledger.update_status(job_id, VideoStatus.COMPLETED, storage_path=path, video_url="https://x")
    return job_id


# --- Fixtures ---


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def store():
    return InMemoryArtifactStore()
