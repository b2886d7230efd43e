from typing import Optional

import structlog

from ..errors import DecodeError
from ..schemas.media import MediaFile
from ..storage.provider import StorageProvider
from .imaging import render_thumbnail
from .namer import generate_key, thumbnail_name

logger = structlog.get_logger(__name__)


def thumbnail_path(folder: str, original_name: str) -> str:
    return f"{folder}/thumbnails/{generate_key(thumbnail_name(original_name))}"


def generate_thumbnail(
    storage: StorageProvider,
    file: MediaFile,
    bucket: str,
    folder: str,
    max_edge: int = 300,
    jpeg_quality: float = 0.75,
) -> Optional[str]:
    """
    Store a JPEG thumbnail of an image file and return its public URL.

    A thumbnail is optional: decode, encode and storage failures are logged
    and resolve to None instead of failing the upload it belongs to.
    """
    if not file.is_image:
        return None

    try:
        jpeg, dims = render_thumbnail(file.data, max_edge=max_edge, jpeg_quality=jpeg_quality)
    except DecodeError as e:
        logger.warning("Thumbnail generation failed", file_name=file.name, error=str(e))
        return None

    path = thumbnail_path(folder, file.name)
    try:
        url = storage.put_object(bucket, path, jpeg, content_type="image/jpeg", overwrite=False)
    except Exception as e:
        # StorageError, or a provider client's own transport error
        logger.warning("Thumbnail upload failed", bucket=bucket, path=path, error=str(e) or repr(e))
        return None

    logger.info(
        "Thumbnail stored",
        bucket=bucket,
        path=path,
        size=len(jpeg),
        dimensions=f"{dims.width}x{dims.height}",
    )
    return url
