"""
Storage backends for published videos.

This module provides:
- MinIOArtifactStore: Production storage using MinIO object storage
- get_artifact_store: Factory function to get the appropriate backend

The storage backend is selected based on the USE_LOCAL_STORAGE setting.
"""

from __future__ import annotations

import io
import json
from urllib.parse import quote

from loguru import logger

from reelsmith_core.config import settings
from reelsmith_core.infrastructure.minio import get_minio_client

from app.generation.protocols import ArtifactStore


def public_read_policy(bucket_name: str) -> str:
    """Bucket policy JSON granting anonymous ``s3:GetObject`` on every key."""
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{bucket_name}/*"],
                }
            ],
        }
    )


class MinIOArtifactStore:
    """
    MinIO-based storage for production deployments.

    Objects are written under caller-chosen keys, so writing the same key
    twice replaces the object instead of creating a second one.

    Usage:
        store = MinIOArtifactStore()
        path = store.put("job-1/video_abc.mp4", data, "video/mp4")
        url = store.public_url(path)
    """

    def __init__(self, bucket: str | None = None, public_base_url: str | None = None):
        """Initialize the MinIO artifact store."""
        self._client = get_minio_client()
        self.bucket = bucket or settings.STORAGE_BUCKET
        self.public_base_url = (public_base_url or settings.STORAGE_PUBLIC_BASE_URL).rstrip("/")

        self.ensure_bucket_exists(self.bucket)

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        """Create bucket if it doesn't exist and open it for anonymous reads."""
        try:
            if not self._client.bucket_exists(bucket_name):
                self._client.make_bucket(bucket_name)
                self._client.set_bucket_policy(bucket_name, public_read_policy(bucket_name))
                logger.info(f"Created MinIO bucket '{bucket_name}' with public read access")
        except Exception as e:
            logger.warning(f"Could not ensure bucket '{bucket_name}' exists: {e}")

    def put(self, path: str, content: bytes, content_type: str) -> str:
        """
        Upload content to MinIO, replacing any object at the same key.

        Args:
            path: Object key inside the bucket.
            content: The file content as bytes.
            content_type: MIME type stored with the object.

        Returns:
            str: The object key.
        """
        logger.info(f"Uploading {len(content)} bytes to {self.bucket}/{path}")

        self._client.put_object(
            bucket_name=self.bucket,
            object_name=path,
            data=io.BytesIO(content),
            length=len(content),
            content_type=content_type,
        )

        logger.info(f"Uploaded to {self.bucket}/{path}")
        return path

    def public_url(self, path: str) -> str:
        """
        Build the public URL of an object.

        Buckets created here get an anonymous read policy; the URL is
        ``<public base>/<bucket>/<key>``.
        """
        base = self.public_base_url
        if not base:
            scheme = "https" if settings.MINIO_SECURE else "http"
            base = f"{scheme}://{settings.MINIO_ENDPOINT}"
        return f"{base}/{self.bucket}/{quote(path)}"

    def delete(self, path: str) -> None:
        """Remove an object from the bucket."""
        logger.info(f"Deleting {self.bucket}/{path}")
        self._client.remove_object(self.bucket, path)


def get_artifact_store() -> ArtifactStore:
    """
    Factory function to get the appropriate storage backend.

    Uses USE_LOCAL_STORAGE setting to determine which backend to use.
    Defaults to MinIO for production.
    """
    if settings.USE_LOCAL_STORAGE:
        from .local_storage import LocalArtifactStore

        logger.info("Using LocalArtifactStore backend")
        return LocalArtifactStore(base_path=settings.LOCAL_STORAGE_PATH)

    logger.info("Using MinIOArtifactStore backend")
    return MinIOArtifactStore()
