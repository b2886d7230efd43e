from functools import lru_cache
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from ..catalog.sql_store import SqlCatalogStore
from ..catalog.store import CatalogStore
from ..catalog.supabase_store import SupabaseCatalogStore
from ..config import settings
from ..errors import StorageError, ValidationError
from ..schemas.media import BatchUploadResponse, MediaFile, UploadOptions, UploadResponse
from ..services.metadata import MetadataRecorder
from ..services.orchestrator import UploadOrchestrator
from ..services.preview import options_for_media_type, preview_kind
from ..services.sections import replace_section_photo
from ..storage.blob_provider import BlobStorageProvider
from ..storage.local_provider import LocalStorageProvider
from ..storage.provider import StorageProvider
from ..storage.supabase_provider import SupabaseStorageProvider
from ..supabase_client import get_supabase

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/media", tags=["media"])


@lru_cache(maxsize=1)
def get_storage() -> StorageProvider:
    """
    Get storage provider based on configuration.
    Uses LocalStorageProvider for local development unless STORAGE_PROVIDER
    selects the hosted Supabase bucket or Azure Blob Storage.
    """
    if settings.storage_provider == "supabase":
        return SupabaseStorageProvider(get_supabase())
    if settings.storage_provider == "blob":
        return BlobStorageProvider()
    return LocalStorageProvider()


@lru_cache(maxsize=1)
def get_catalog() -> CatalogStore:
    if settings.catalog_backend == "supabase":
        return SupabaseCatalogStore(get_supabase())
    return SqlCatalogStore()


@lru_cache(maxsize=1)
def get_recorder() -> MetadataRecorder:
    # Shared so background catalog writes outlive the request that scheduled them
    return MetadataRecorder(get_catalog())


def build_options(
    bucket: Optional[str],
    folder: Optional[str],
    generate_thumbnail: Optional[bool],
    media_type: Optional[str],
) -> UploadOptions:
    options = UploadOptions.from_settings(
        bucket=bucket, folder=folder, generate_thumbnail=generate_thumbnail
    )
    if media_type:
        try:
            options = options_for_media_type(media_type, options)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return options


async def read_upload(file: UploadFile) -> MediaFile:
    data = await file.read()
    return MediaFile.from_bytes(file.filename or "upload", data, file.content_type)


@router.post("/upload", response_model=UploadResponse)
async def upload(
    file: UploadFile = File(...),
    bucket: Optional[str] = Form(None),
    folder: Optional[str] = Form(None),
    generate_thumbnail: Optional[bool] = Form(None),
    media_type: Optional[str] = Form(None),
    storage: StorageProvider = Depends(get_storage),
    recorder: MetadataRecorder = Depends(get_recorder),
):
    options = build_options(bucket, folder, generate_thumbnail, media_type)
    uploader = UploadOrchestrator(storage, recorder, options)
    outcome = await uploader.upload_with_outcome(await read_upload(file))

    if isinstance(outcome.error, ValidationError):
        raise HTTPException(status_code=422, detail=outcome.error.reason)
    if isinstance(outcome.error, StorageError):
        raise HTTPException(status_code=502, detail=str(outcome.error))
    return UploadResponse(
        url=outcome.url,
        thumbnail_url=outcome.thumbnail_url,
        preview=preview_kind(outcome.url),
    )


@router.post("/upload-multiple", response_model=BatchUploadResponse)
async def upload_multiple(
    files: List[UploadFile] = File(...),
    bucket: Optional[str] = Form(None),
    folder: Optional[str] = Form(None),
    generate_thumbnail: Optional[bool] = Form(None),
    media_type: Optional[str] = Form(None),
    storage: StorageProvider = Depends(get_storage),
    recorder: MetadataRecorder = Depends(get_recorder),
):
    """Upload several files in order; failed files are listed, not fatal."""
    options = build_options(bucket, folder, generate_thumbnail, media_type)
    errors: List[str] = []
    uploader = UploadOrchestrator(storage, recorder, options, on_error=lambda e: errors.append(str(e)))
    media_files = [await read_upload(f) for f in files]
    urls = await uploader.upload_multiple(media_files)
    return BatchUploadResponse(urls=urls, errors=errors, progress=uploader.progress)


@router.put("/sections/{slot_id}", response_model=UploadResponse)
async def replace_section(
    slot_id: str,
    file: UploadFile = File(...),
    storage: StorageProvider = Depends(get_storage),
):
    try:
        url = await replace_section_photo(storage, slot_id, await read_upload(file))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.reason)
    except StorageError as e:
        logger.error("Section photo upload failed", slot_id=slot_id, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    return UploadResponse(url=url, preview=preview_kind(url))


@router.get("/local/{bucket}/{file_path:path}")
def serve_local_file(bucket: str, file_path: str):
    """Serve files from local storage for development."""
    from mimetypes import guess_type

    local_storage = LocalStorageProvider()
    file_path_obj = local_storage._get_path(bucket, file_path)

    # Ensure the file is within the storage directory
    storage_base = local_storage.base_dir.resolve()
    if not file_path_obj.resolve().is_relative_to(storage_base):
        raise HTTPException(status_code=403, detail="Access denied")

    if not file_path_obj.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    content_type = guess_type(str(file_path_obj))[0] or "application/octet-stream"
    return FileResponse(path=str(file_path_obj), media_type=content_type, filename=file_path_obj.name)
