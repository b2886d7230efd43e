"""
Local filesystem storage provider for development.
Saves objects under a local directory instead of the hosted object store.
"""
import os
from typing import Optional
from pathlib import Path
from urllib.parse import quote

import structlog

from ..config import settings
from ..errors import StorageError
from .provider import StorageProvider, clean_path

logger = structlog.get_logger(__name__)


class LocalStorageProvider(StorageProvider):
    """Local filesystem storage provider for development."""

    def __init__(self, base_dir: Optional[str] = None, public_base_url: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.local_storage_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")

    def _get_path(self, bucket: str, path: str) -> Path:
        """Get the local filesystem path for a given bucket/path."""
        return self.base_dir / clean_path(bucket) / clean_path(path)

    def put_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = False,
    ) -> str:
        target = self._get_path(bucket, path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # "xb" refuses to replace an existing file atomically
            with open(target, "wb" if overwrite else "xb") as f:
                f.write(data)
        except FileExistsError as e:
            raise StorageError(bucket, path, "The resource already exists", e) from e
        except OSError as e:
            logger.error("local_put_failed", bucket=bucket, path=path, error=str(e))
            raise StorageError(bucket, path, str(e), e) from e
        logger.info("local_put", bucket=bucket, path=path, size=len(data), overwrite=overwrite)
        return self.get_public_url(bucket, path)

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/media/local/{quote(clean_path(bucket))}/{quote(clean_path(path))}"

    def exists(self, bucket: str, path: str) -> bool:
        return self._get_path(bucket, path).exists()

    def delete(self, bucket: str, path: str) -> None:
        target = self._get_path(bucket, path)
        if target.exists():
            os.remove(target)
