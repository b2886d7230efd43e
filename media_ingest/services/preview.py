import re
from typing import Optional
from urllib.parse import urlparse

from ..schemas.media import UploadOptions

_IMAGE_RE = re.compile(r"\.(jpeg|jpg|gif|png|webp|svg)$", re.IGNORECASE)
_VIDEO_RE = re.compile(r"\.(mp4|webm|ogg|mov)$", re.IGNORECASE)

# Per media type: accepted MIME patterns and size limit in MB
MEDIA_TYPE_LIMITS = {
    "image": (["image/*"], 5),
    "video": (["video/*"], 100),
}


def preview_kind(url: Optional[str]) -> Optional[str]:
    """Return "image" or "video" when the URL's extension can be previewed."""
    if not url:
        return None
    path = urlparse(url).path
    if _IMAGE_RE.search(path):
        return "image"
    if _VIDEO_RE.search(path):
        return "video"
    return None


def options_for_media_type(media_type: str, base: Optional[UploadOptions] = None) -> UploadOptions:
    if media_type not in MEDIA_TYPE_LIMITS:
        raise ValueError(f"Unknown media type: {media_type}")
    accepted, max_size_mb = MEDIA_TYPE_LIMITS[media_type]
    base = base or UploadOptions()
    return base.model_copy(update={"accepted_types": list(accepted), "max_size_mb": max_size_mb})
