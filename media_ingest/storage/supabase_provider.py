"""
Supabase Storage provider.

Objects are written with a one hour cache-control header. The "upsert" file
option mirrors the overwrite flag, so collision-avoiding media keys are
created once and section-slot keys are replaced in place.
"""
from typing import Optional

import structlog
from supabase import Client

from ..errors import StorageError
from .provider import StorageProvider, clean_path

logger = structlog.get_logger(__name__)


class SupabaseStorageProvider(StorageProvider):
    def __init__(self, client: Client):
        self._client = client

    def put_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = False,
    ) -> str:
        key = clean_path(path)
        try:
            self._client.storage.from_(bucket).upload(
                path=key,
                file=data,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "cache-control": "3600",
                    "upsert": "true" if overwrite else "false",
                },
            )
        except Exception as e:
            logger.error("supabase_put_failed", bucket=bucket, path=key, error=str(e))
            raise StorageError(bucket, key, str(e), e) from e
        logger.info("supabase_put", bucket=bucket, path=key, size=len(data), overwrite=overwrite)
        return self.get_public_url(bucket, key)

    def get_public_url(self, bucket: str, path: str) -> str:
        return self._client.storage.from_(bucket).get_public_url(clean_path(path))

    def exists(self, bucket: str, path: str) -> bool:
        key = clean_path(path)
        folder, _, name = key.rpartition("/")
        entries = self._client.storage.from_(bucket).list(folder, {"search": name})
        return any(entry.get("name") == name for entry in entries or [])

    def delete(self, bucket: str, path: str) -> None:
        self._client.storage.from_(bucket).remove([clean_path(path)])
