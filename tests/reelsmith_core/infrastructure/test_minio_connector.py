"""
Unit tests for the MinIO infrastructure client.

The MinIO client is a settings-configured singleton shared by every
publisher.
"""

from unittest.mock import MagicMock, patch

import pytest


class TestMinioClientConnector:
    """Tests for MinIO singleton connector."""

    def test_returns_same_instance_on_multiple_calls(self, mock_minio_module):
        """Multiple calls should return the same instance (singleton)."""
        from reelsmith_core.infrastructure.minio import MinioClientConnector

        client1 = MinioClientConnector.get_instance()
        client2 = MinioClientConnector.get_instance()

        assert client1 is client2
        mock_minio_module.assert_called_once()

    def test_uses_settings_for_configuration(self, mock_minio_module):
        """Should use settings from reelsmith_core.config."""
        from reelsmith_core.infrastructure.minio import MinioClientConnector

        with patch("reelsmith_core.infrastructure.minio.settings") as mock_settings:
            mock_settings.MINIO_ENDPOINT = "minio.example.com:9000"
            mock_settings.MINIO_ACCESS_KEY = "myaccess"
            mock_settings.MINIO_SECRET_KEY = "mysecret"
            mock_settings.MINIO_SECURE = True

            MinioClientConnector.get_instance()

            call_kwargs = mock_minio_module.call_args[1]
            assert call_kwargs["endpoint"] == "minio.example.com:9000"
            assert call_kwargs["secure"] is True

    def test_reset_drops_cached_client(self, mock_minio_module):
        from reelsmith_core.infrastructure.minio import MinioClientConnector, get_minio_client

        get_minio_client()
        MinioClientConnector.reset()
        get_minio_client()

        assert mock_minio_module.call_count == 2


class TestOpenAIClientSingleton:
    def test_missing_api_key_raises_configuration_error(self):
        from reelsmith_core.domain.exceptions import ConfigurationError
        from reelsmith_core.infrastructure.openai_client import OpenAIClientSingleton

        OpenAIClientSingleton.reset()
        with patch("reelsmith_core.infrastructure.openai_client.settings") as mock_settings:
            mock_settings.OPENAI_API_KEY = ""

            with pytest.raises(ConfigurationError):
                OpenAIClientSingleton.get_instance()

    def test_builds_client_with_configured_base_url(self):
        from reelsmith_core.infrastructure.openai_client import OpenAIClientSingleton

        OpenAIClientSingleton.reset()
        with patch("reelsmith_core.infrastructure.openai_client.settings") as mock_settings, patch(
            "openai.OpenAI"
        ) as mock_openai:
            mock_settings.OPENAI_API_KEY = "sk-test"
            mock_settings.OPENAI_BASE_URL = "https://proxy.test/v1"

            OpenAIClientSingleton.get_instance()

            mock_openai.assert_called_once_with(api_key="sk-test", base_url="https://proxy.test/v1")
        OpenAIClientSingleton.reset()


# --- Fixtures ---


@pytest.fixture
def mock_minio_module():
    """Mock the Minio class and reset the singleton around each test."""
    from reelsmith_core.infrastructure.minio import MinioClientConnector

    MinioClientConnector.reset()
    with patch("reelsmith_core.infrastructure.minio.Minio") as mock_minio:
        mock_minio.return_value = MagicMock()
        yield mock_minio
    MinioClientConnector.reset()
