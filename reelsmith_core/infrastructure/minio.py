"""
Shared MinIO client for publishing generated videos.

The client is created lazily on first use from the MINIO_* settings and
reused by every artifact store in the process.
"""

from loguru import logger
from minio import Minio

from reelsmith_core.config import settings


class MinioClientConnector:
    """
    Lazily built, process-wide MinIO client.

    Usage:
        client = MinioClientConnector.get_instance()
        client.put_object(bucket_name="recipe-videos", ...)
    """

    _instance: Minio | None = None

    @classmethod
    def get_instance(cls) -> Minio:
        """Return the cached client, building it on first call."""
        if cls._instance is None:
            try:
                cls._instance = Minio(
                    endpoint=settings.MINIO_ENDPOINT,
                    access_key=settings.MINIO_ACCESS_KEY,
                    secret_key=settings.MINIO_SECRET_KEY,
                    secure=settings.MINIO_SECURE,
                )
                logger.info(f"Video store client ready for '{settings.MINIO_ENDPOINT}'")
            except Exception as e:
                logger.error(f"Could not build MinIO client for '{settings.MINIO_ENDPOINT}': {e}")
                raise

        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (tests, credential rotation)."""
        cls._instance = None


def get_minio_client() -> Minio:
    return MinioClientConnector.get_instance()
