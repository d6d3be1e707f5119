"""
Unit tests for the video API routes.

Collaborators are replaced through FastAPI dependency overrides so no
provider, database or object store is touched.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.generation.config import PipelineConfig
from app.generation.services.history import GenerationHistoryService
from app.generation.services.pipeline import GenerationPipeline
from app.generation.state import VideoStatus
from reelsmith_core.domain.exceptions import ConfigurationError, PromptError
from reelsmith_core.runtime.budget import StageBudget
from reelsmith_core.runtime.http_client import ProviderResponseError
from tests.app.generation.fakes import (
    FakeClock,
    FakeVideoProvider,
    InMemoryArtifactStore,
    InMemoryLedger,
)


class TestHealth:
    def test_health_endpoint_returns_ok(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "service" in response.json()


class TestGenerateVideo:
    def test_success_returns_200(self, test_client, use_provider, ledger):
        use_provider(FakeVideoProvider(create={"id": "video_abc"}))

        response = test_client.post("/videos", json={"video_prompt": "Make pasta"})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["openai_video_id"] == "video_abc"
        assert body["video_url"].endswith(f"{body['id']}/video_abc.mp4")
        assert ledger.rows[body["id"]]["status"] == "completed"

    def test_terminal_failure_returns_500(self, test_client, use_provider):
        use_provider(FakeVideoProvider(create=ProviderResponseError(400, "bad prompt")))

        response = test_client.post("/videos", json={"video_prompt": "Make pasta"})

        assert response.status_code == 500
        body = response.json()
        assert body["status"] == "failed"
        assert body["error"] == "bad prompt"
        assert body["retryable"] is False

    def test_retryable_failure_returns_504(self, test_client, use_provider):
        use_provider(FakeVideoProvider(statuses=[{"status": "in_progress"}]))

        response = test_client.post("/videos", json={"video_prompt": "Make pasta"})

        assert response.status_code == 504
        assert response.json()["code"] == "GENERATION_TIMEOUT"

    @pytest.mark.parametrize(
        "overrides",
        [{"seconds": "ten"}, {"seconds": 7.5}, {"size": 1280}, {"size": "640x480", "seconds": 7}],
    )
    def test_malformed_parameters_fall_back_to_defaults(self, test_client, use_provider, overrides):
        provider = FakeVideoProvider(create={"id": "video_abc"})
        use_provider(provider)

        response = test_client.post("/videos", json={"video_prompt": "Make pasta", **overrides})

        assert response.status_code == 200
        assert provider.create_calls[0]["size"] == "1280x720"
        assert provider.create_calls[0]["seconds"] == 12

    def test_numeric_text_duration_is_accepted(self, test_client, use_provider):
        provider = FakeVideoProvider(create={"id": "video_abc"})
        use_provider(provider)

        response = test_client.post("/videos", json={"video_prompt": "Make pasta", "seconds": "8"})

        assert response.status_code == 200
        assert provider.create_calls[0]["seconds"] == 8

    def test_blank_prompt_is_rejected(self, test_client, use_provider):
        use_provider(FakeVideoProvider())

        response = test_client.post("/videos", json={"video_prompt": "   "})

        assert response.status_code == 422

    def test_missing_configuration_is_500(self, test_client):
        from app.generation.factory import pipeline_dependency
        from app.main import app

        def broken():
            raise ConfigurationError("OPENAI_API_KEY is missing")

        app.dependency_overrides[pipeline_dependency] = broken

        response = test_client.post("/videos", json={"video_prompt": "Make pasta"})

        assert response.status_code == 500
        assert response.json()["code"] == "CONFIGURATION_ERROR"


class TestComposePrompt:
    def test_returns_directive(self, test_client, director):
        director.compose_async = AsyncMock(return_value="Open on a green lemon logo")

        response = test_client.post(
            "/videos/prompt",
            json={"recipe_text": "Pasta", "people": "Two friends", "region": "Europe"},
        )

        assert response.status_code == 200
        assert response.json() == {"video_prompt": "Open on a green lemon logo"}

    def test_failure_returns_500(self, test_client, director):
        director.compose_async = AsyncMock(side_effect=PromptError("Failed to generate video prompt"))

        response = test_client.post(
            "/videos/prompt",
            json={"recipe_text": "Pasta", "people": "Two friends", "region": "US"},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate video prompt"

    def test_unknown_region_is_rejected(self, test_client, director):
        response = test_client.post(
            "/videos/prompt",
            json={"recipe_text": "Pasta", "people": "Two friends", "region": "Mars"},
        )

        assert response.status_code == 422


class TestHistory:
    def test_lists_history_without_caching(self, test_client, ledger):
        ledger.create_job(video_prompt="first")
        ledger.create_job(video_prompt="second")

        response = test_client.get("/videos/history?limit=1&page=1")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        body = response.json()
        assert body["total"] == 2
        assert len(body["history"]) == 1

    def test_get_generation(self, test_client, ledger):
        job_id = ledger.create_job(video_prompt="first")

        response = test_client.get(f"/videos/{job_id}")

        assert response.status_code == 200
        assert response.json()["video_prompt"] == "first"
        assert response.json()["status"] == "queued"

    def test_get_missing_generation_is_404(self, test_client):
        response = test_client.get("/videos/does-not-exist")

        assert response.status_code == 404

    def test_delete_generation(self, test_client, ledger, store):
        job_id = ledger.create_job(video_prompt="first")
        ledger.update_status(job_id, VideoStatus.FAILED, error_message="bad")

        response = test_client.delete(f"/videos/{job_id}")

        assert response.status_code == 200
        assert response.json() == {"id": job_id, "deleted": True, "storage_path": None}
        assert job_id not in ledger.rows

    def test_delete_missing_generation_is_404(self, test_client):
        response = test_client.delete("/videos/does-not-exist")

        assert response.status_code == 404


# --- Fixtures ---


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def store():
    return InMemoryArtifactStore()


@pytest.fixture
def director():
    return MagicMock()


@pytest.fixture
def use_provider(ledger, store):
    """Install a pipeline built around the given fake provider."""
    from app.generation.factory import pipeline_dependency
    from app.main import app

    def install(provider):
        clock = FakeClock()
        config = PipelineConfig(
            poll=StageBudget(interval=2, timeout=10),
            fetch=StageBudget(interval=5, timeout=15),
            deadline_seconds=None,
        )
        pipeline = GenerationPipeline(
            provider, ledger, store, config, sleep=clock.sleep, clock=clock
        )
        app.dependency_overrides[pipeline_dependency] = lambda: pipeline

    return install


@pytest.fixture
def test_client(ledger, store, director):
    """Provides a test client with history and prompt dependencies overridden."""
    from app.generation.factory import get_history_service, get_prompt_director
    from app.main import app

    app.dependency_overrides[get_history_service] = lambda: GenerationHistoryService(ledger, store)
    app.dependency_overrides[get_prompt_director] = lambda: director

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
