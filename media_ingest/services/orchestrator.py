"""
Upload orchestration.

One UploadOrchestrator serves one caller (an admin form, an HTTP request)
and runs one upload at a time:

    validate -> name -> probe dimensions -> store original
        -> store thumbnail (optional) -> catalog row (background)

Only a rejected file and a failed write of the original fail the call. A
missing thumbnail, unreadable dimensions or a failed catalog write just leave
that piece out. Blocking work (Pillow, storage and catalog clients) runs in
worker threads so the event loop keeps serving other requests.
"""
import asyncio
from typing import Callable, Iterable, List, Optional

import structlog

from ..config import settings
from ..errors import BusyError, StorageError, ValidationError
from ..schemas.media import (
    CatalogEntry,
    MediaFile,
    UploadOptions,
    UploadOutcome,
    UploadStage,
    UploadState,
)
from ..storage.provider import StorageProvider
from .imaging import probe_dimensions
from .metadata import MetadataRecorder
from .namer import generate_key
from .thumbnails import generate_thumbnail
from .validator import validate

logger = structlog.get_logger(__name__)

SuccessCallback = Callable[[str, MediaFile], None]
ErrorCallback = Callable[[Exception], None]

# Progress reached when each stage completes
_STAGE_PROGRESS = {
    UploadStage.VALIDATING: 10,
    UploadStage.PROBING_DIMENSIONS: 20,
    UploadStage.UPLOADING_ORIGINAL: 70,
    UploadStage.GENERATING_THUMBNAIL: 90,
}


class UploadOrchestrator:
    def __init__(
        self,
        storage: StorageProvider,
        recorder: Optional[MetadataRecorder] = None,
        options: Optional[UploadOptions] = None,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        thumbnail_max_edge: Optional[int] = None,
        thumbnail_jpeg_quality: Optional[float] = None,
        catalog_folders: Optional[Iterable[str]] = None,
    ):
        self.storage = storage
        self.recorder = recorder
        self.options = options or UploadOptions()
        self.on_success = on_success
        self.on_error = on_error
        self.thumbnail_max_edge = thumbnail_max_edge or settings.thumbnail_max_edge
        self.thumbnail_jpeg_quality = thumbnail_jpeg_quality or settings.thumbnail_jpeg_quality
        self.catalog_folders = set(catalog_folders if catalog_folders is not None else settings.catalog_folders)
        self.state = UploadState()

    # Observable state
    @property
    def is_uploading(self) -> bool:
        return self.state.is_uploading

    @property
    def progress(self) -> float:
        return self.state.progress

    @property
    def error(self) -> Optional[Exception]:
        return self.state.error

    @property
    def uploaded_url(self) -> Optional[str]:
        return self.state.uploaded_url

    def _enter(self, stage: UploadStage) -> None:
        self.state.stage = stage
        logger.debug("Upload stage", stage=stage.value)

    def _complete(self, stage: UploadStage) -> None:
        self.state.progress = _STAGE_PROGRESS[stage]

    async def upload(self, file: MediaFile) -> Optional[str]:
        """Upload one file; returns its public URL, or None on failure."""
        outcome = await self.upload_with_outcome(file)
        return outcome.url

    def _claim(self) -> None:
        if self.state.is_uploading:
            raise BusyError("An upload is already in progress on this uploader")
        self.state.is_uploading = True

    async def upload_with_outcome(self, file: MediaFile) -> UploadOutcome:
        self._claim()
        try:
            return await self._attempt(file)
        finally:
            self.state.is_uploading = False

    async def _attempt(self, file: MediaFile) -> UploadOutcome:
        self.state.error = None
        self.state.uploaded_url = None
        self.state.progress = 0
        try:
            outcome = await self._run(file)
        except (ValidationError, StorageError) as e:
            self._enter(UploadStage.RESOLVED)
            self.state.error = e
            logger.warning("File upload error", file_name=file.name, error=str(e))
            if self.on_error:
                self.on_error(e)
            return UploadOutcome(error=e)

        self._enter(UploadStage.RESOLVED)
        self.state.uploaded_url = outcome.url
        self.state.progress = 100
        if self.on_success:
            self.on_success(outcome.url, file)
        return outcome

    async def _run(self, file: MediaFile) -> UploadOutcome:
        opts = self.options

        self._enter(UploadStage.VALIDATING)
        result = validate(file, opts.accepted_types, opts.max_size_mb)
        if not result.valid:
            raise ValidationError(result.reason)
        self._complete(UploadStage.VALIDATING)

        self._enter(UploadStage.NAMING)
        path = f"{opts.folder}/{generate_key(file.name)}"

        self._enter(UploadStage.PROBING_DIMENSIONS)
        dims = await asyncio.to_thread(probe_dimensions, file) if file.is_image else None
        self._complete(UploadStage.PROBING_DIMENSIONS)

        self._enter(UploadStage.UPLOADING_ORIGINAL)
        try:
            url = await asyncio.to_thread(
                self.storage.put_object, opts.bucket, path, file.data, file.content_type, False
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(opts.bucket, path, str(e), e) from e
        self._complete(UploadStage.UPLOADING_ORIGINAL)
        logger.info("Uploaded file", bucket=opts.bucket, path=path, size=file.size)

        thumbnail_url = None
        if opts.generate_thumbnail and file.is_image:
            self._enter(UploadStage.GENERATING_THUMBNAIL)
            thumbnail_url = await asyncio.to_thread(
                generate_thumbnail,
                self.storage,
                file,
                opts.bucket,
                opts.folder,
                self.thumbnail_max_edge,
                self.thumbnail_jpeg_quality,
            )
            self._complete(UploadStage.GENERATING_THUMBNAIL)

        if self.recorder is not None and opts.folder in self.catalog_folders:
            self._enter(UploadStage.RECORDING_METADATA)
            self.recorder.record_in_background(
                CatalogEntry(
                    file_name=file.name,
                    file_path=url,
                    file_type=file.content_type,
                    file_size=file.size,
                    width=dims.width if dims else None,
                    height=dims.height if dims else None,
                    thumbnail_path=thumbnail_url,
                )
            )

        return UploadOutcome(url=url, thumbnail_url=thumbnail_url)

    async def upload_multiple(self, files: Iterable[MediaFile]) -> List[str]:
        """
        Upload files one after another.

        Failed files are reported through on_error and left out of the
        returned URL list; they never stop the remaining files. Progress is
        the share of files finished so far. The uploader stays busy for the
        whole batch, so no single upload can interleave with it.
        """
        files = list(files)
        self._claim()
        urls: List[str] = []
        try:
            for i, file in enumerate(files):
                outcome = await self._attempt(file)
                if outcome.url:
                    urls.append(outcome.url)
                self.state.progress = (i + 1) / len(files) * 100
        finally:
            self.state.is_uploading = False
        return urls

    async def wait_for_background(self) -> None:
        if self.recorder is not None:
            await self.recorder.wait_for_background()
