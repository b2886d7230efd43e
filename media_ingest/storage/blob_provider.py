from typing import Optional

import structlog
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

from ..config import settings
from ..errors import StorageError
from .provider import StorageProvider, clean_path

logger = structlog.get_logger(__name__)


class BlobStorageProvider(StorageProvider):
    """Azure Blob Storage; each bucket maps to a container."""

    def __init__(self, service: Optional[BlobServiceClient] = None) -> None:
        if service is None:
            if not settings.azure_blob_connection:
                raise RuntimeError("AZURE_BLOB_CONNECTION must be set")
            service = BlobServiceClient.from_connection_string(settings.azure_blob_connection)
        self._service = service

    def put_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: Optional[str] = None,
        overwrite: bool = False,
    ) -> str:
        client = self._service.get_blob_client(bucket, clean_path(path))
        try:
            client.upload_blob(
                data,
                overwrite=overwrite,
                content_settings=ContentSettings(
                    content_type=content_type or "application/octet-stream",
                    cache_control="max-age=3600",
                ),
            )
        except ResourceExistsError as e:
            raise StorageError(bucket, path, "The resource already exists", e) from e
        except AzureError as e:
            logger.error("blob_put_failed", bucket=bucket, path=path, error=str(e))
            raise StorageError(bucket, path, str(e), e) from e
        logger.info("blob_put", bucket=bucket, path=path, size=len(data), overwrite=overwrite)
        return client.url

    def get_public_url(self, bucket: str, path: str) -> str:
        return self._service.get_blob_client(bucket, clean_path(path)).url

    def exists(self, bucket: str, path: str) -> bool:
        return self._service.get_blob_client(bucket, clean_path(path)).exists()

    def delete(self, bucket: str, path: str) -> None:
        client = self._service.get_blob_client(bucket, clean_path(path))
        try:
            client.delete_blob()
        except ResourceNotFoundError:
            pass
