"""
"Replace this photo" uploads for fixed site sections (hero slides, banners).

Unlike media library uploads, a section slot owns one fixed object key and
every upload overwrites it. No thumbnail and no catalog row are produced.
"""
import asyncio
from typing import Optional

import structlog
from slugify import slugify

from ..config import settings
from ..errors import ValidationError
from ..schemas.media import MediaFile, UploadOptions
from ..storage.provider import StorageProvider
from .namer import file_extension
from .validator import validate

logger = structlog.get_logger(__name__)


def section_slot_path(slot_id: str, filename: str, folder: Optional[str] = None) -> str:
    folder = folder or settings.section_folder
    ext = file_extension(filename)
    name = slugify(slot_id) or "section"
    return f"{folder}/{name}.{ext}" if ext else f"{folder}/{name}"


async def replace_section_photo(
    storage: StorageProvider,
    slot_id: str,
    file: MediaFile,
    options: Optional[UploadOptions] = None,
) -> str:
    """
    Validate and write a section photo over the slot's current object.

    Raises:
        ValidationError: If the file is rejected
        StorageError: If the write fails
    """
    options = options or UploadOptions(
        bucket=settings.section_bucket,
        folder=settings.section_folder,
        accepted_types=["image/*"],
    )
    result = validate(file, options.accepted_types, options.max_size_mb)
    if not result.valid:
        raise ValidationError(result.reason)

    path = section_slot_path(slot_id, file.name, options.folder)
    url = await asyncio.to_thread(
        storage.put_object, options.bucket, path, file.data, file.content_type, True
    )
    logger.info("Section photo replaced", slot_id=slot_id, bucket=options.bucket, path=path)
    return url
