"""
Local filesystem storage backend.

This implementation stores videos on the local filesystem,
useful for development and testing without MinIO.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger


class LocalArtifactStore:
    """
    File-system based storage for local development.

    Usage:
        store = LocalArtifactStore(base_path="/tmp/reelsmith-storage")
        path = store.put("job-1/video_abc.mp4", data, "video/mp4")
    """

    def __init__(self, base_path: str = "/tmp/reelsmith-storage", public_base_url: str | None = None):
        """
        Initialize local storage.

        Args:
            base_path: Root directory for all stored files.
            public_base_url: Optional URL prefix under which base_path is served.
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        logger.info(f"LocalArtifactStore initialized at {self.base_path}")

    def _resolve(self, path: str) -> Path:
        target = (self.base_path / path).resolve()
        if self.base_path.resolve() not in target.parents:
            raise ValueError(f"Invalid storage path: {path}")
        return target

    def put(self, path: str, content: bytes, content_type: str) -> str:
        """Write content to ``base_path/path``, replacing any existing file."""
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

        logger.info(f"Stored {len(content)} bytes ({content_type}) at {path}")
        return path

    def public_url(self, path: str) -> str:
        target = self._resolve(path)
        if self.public_base_url:
            return f"{self.public_base_url}/{path}"
        return target.as_uri()

    def delete(self, path: str) -> None:
        target = self._resolve(path)

        if target.exists():
            target.unlink()
            logger.info(f"Deleted {path}")
        else:
            logger.warning(f"File not found for deletion: {path}")
