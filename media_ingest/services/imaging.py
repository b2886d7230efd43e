"""
Image geometry and encoding for uploaded photos.

Decoding happens fully in memory with Pillow; HEIC/HEIF (iPhone) photos are
supported through pillow-heif.
"""
import io
from typing import Optional, Tuple

import structlog
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from ..errors import DecodeError
from ..schemas.media import Dimensions, MediaFile

register_heif_opener()

logger = structlog.get_logger(__name__)


def probe_dimensions(file: MediaFile) -> Optional[Dimensions]:
    """
    Read intrinsic pixel width/height of an image file.

    Returns None for non-image types (without touching the payload) and for
    payloads that cannot be decoded.
    """
    if not file.is_image:
        return None
    try:
        with Image.open(io.BytesIO(file.data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.warning("Could not read image dimensions", file_name=file.name, error=str(e))
        return None
    return Dimensions(width=width, height=height)


def thumbnail_size(width: int, height: int, max_edge: int) -> Tuple[int, int]:
    """
    Scale (width, height) so the longer edge equals max_edge.

    Aspect ratio is preserved with the shorter edge rounded to the nearest
    pixel. Images already within max_edge on both edges are not upscaled.
    """
    if width >= height:
        if width <= max_edge:
            return width, height
        return max_edge, max(1, round(height * max_edge / width))
    if height <= max_edge:
        return width, height
    return max(1, round(width * max_edge / height)), max_edge


def _to_rgb(img: Image.Image) -> Image.Image:
    # JPEG has no alpha channel; flatten transparent images onto white
    if img.mode in ("RGBA", "LA", "P"):
        if img.mode == "P":
            img = img.convert("RGBA")
        rgb_img = Image.new("RGB", img.size, (255, 255, 255))
        rgb_img.paste(img, mask=img.split()[-1])
        return rgb_img
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def render_thumbnail(data: bytes, max_edge: int = 300, jpeg_quality: float = 0.75) -> Tuple[bytes, Dimensions]:
    """
    Decode, resize in a single resample and re-encode as JPEG.

    Args:
        data: Source image bytes
        max_edge: Longest edge of the thumbnail in pixels
        jpeg_quality: JPEG quality in the 0-1 range

    Returns:
        (jpeg bytes, thumbnail dimensions)

    Raises:
        DecodeError: If the source cannot be decoded or the JPEG cannot be encoded
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            size = thumbnail_size(img.width, img.height, max_edge)
            resized = _to_rgb(img).resize(size, Image.Resampling.LANCZOS)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e

    out = io.BytesIO()
    try:
        resized.save(out, format="JPEG", quality=round(jpeg_quality * 100), optimize=True)
    except (OSError, ValueError) as e:
        raise DecodeError(f"Cannot encode thumbnail: {e}") from e
    finally:
        resized.close()
    return out.getvalue(), Dimensions(width=size[0], height=size[1])
