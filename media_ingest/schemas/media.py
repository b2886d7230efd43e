import mimetypes
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

from ..config import settings


class MediaFile(BaseModel):
    """A user-selected file: payload plus what the client declared about it."""

    model_config = ConfigDict(frozen=True)

    name: str
    content_type: str = "application/octet-stream"
    size: int = Field(ge=0)
    data: bytes = Field(default=b"", repr=False)

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: Optional[str] = None) -> "MediaFile":
        if not content_type:
            guessed, _ = mimetypes.guess_type(name)
            content_type = guessed or "application/octet-stream"
        return cls(name=name, content_type=content_type, size=len(data), data=data)

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")


class UploadOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket: str = "media"
    folder: str = "uploads"
    accepted_types: List[str] = Field(default_factory=lambda: ["image/*", "video/*"])
    max_size_mb: float = 50
    generate_thumbnail: bool = False

    @classmethod
    def from_settings(cls, **overrides: Any) -> "UploadOptions":
        values: Dict[str, Any] = {
            "bucket": settings.upload_bucket,
            "folder": settings.upload_folder,
            "accepted_types": list(settings.upload_accepted_types),
            "max_size_mb": settings.upload_max_size_mb,
            "generate_thumbnail": settings.upload_generate_thumbnail,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class UploadStage(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    NAMING = "naming"
    PROBING_DIMENSIONS = "probing_dimensions"
    UPLOADING_ORIGINAL = "uploading_original"
    GENERATING_THUMBNAIL = "generating_thumbnail"
    RECORDING_METADATA = "recording_metadata"
    RESOLVED = "resolved"


class UploadState(BaseModel):
    """Observable state of one orchestrator. Mutated only by the orchestrator."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    is_uploading: bool = False
    progress: float = 0
    error: Optional[Exception] = None
    uploaded_url: Optional[str] = None
    stage: UploadStage = UploadStage.IDLE


class UploadOutcome(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.url is not None and self.error is None


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: Optional[str] = None


class Dimensions(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int


class CatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_name: str
    file_path: str
    file_type: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    thumbnail_path: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()


class UploadResponse(BaseModel):
    url: str
    thumbnail_url: Optional[str] = None
    preview: Optional[str] = None


class BatchUploadResponse(BaseModel):
    urls: List[str]
    errors: List[str] = []
    progress: float
