"""
Error taxonomy for the media ingestion pipeline.

Only ValidationError and StorageError for the original asset ever reach the
caller of an upload. The others are raised internally and degrade the upload
to "feature omitted" (no thumbnail, no dimensions, no catalog row).
"""
from typing import Optional


class MediaIngestError(Exception):
    """Base class for every error raised by the pipeline."""


class ValidationError(MediaIngestError):
    """The file was rejected by size or type before any I/O happened."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class StorageError(MediaIngestError):
    def __init__(self, bucket: str, path: str, reason: str, cause: Optional[BaseException] = None):
        super().__init__(f"Failed to store {bucket}/{path}: {reason}")
        self.bucket = bucket
        self.path = path
        self.reason = reason
        self.cause = cause


class MetadataError(MediaIngestError):
    def __init__(self, table: str, reason: str, cause: Optional[BaseException] = None):
        super().__init__(f"Failed to write catalog row to {table}: {reason}")
        self.table = table
        self.cause = cause


class DecodeError(MediaIngestError):
    """The payload could not be decoded or re-encoded as an image."""


class BusyError(MediaIngestError):
    """An upload is already in flight on this orchestrator."""
