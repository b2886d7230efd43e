"""Pytest configuration and fixtures for media-ingest tests."""

import io
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional, Tuple

# Settings are read at import time; point them at throwaway locations first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOCAL_STORAGE_DIR", tempfile.mkdtemp(prefix="media-ingest-"))
os.environ.setdefault("STORAGE_PROVIDER", "local")
os.environ.setdefault("CATALOG_BACKEND", "sql")

import pytest
from PIL import Image

from media_ingest.catalog.store import CatalogStore
from media_ingest.errors import MetadataError, StorageError
from media_ingest.schemas.media import MediaFile
from media_ingest.services.metadata import MetadataRecorder
from media_ingest.storage.provider import StorageProvider


class FakeStorage(StorageProvider):
    """In-memory object store that records every write attempt."""

    def __init__(self, fail_on: Optional[Callable[[str], bool]] = None):
        self.objects: Dict[Tuple[str, str], bytes] = {}
        self.content_types: Dict[Tuple[str, str], Optional[str]] = {}
        self.calls: List[Tuple[str, str, bool]] = []
        self.fail_on = fail_on
        self.on_put: Optional[Callable[[str, str], None]] = None

    def put_object(self, bucket, path, data, content_type=None, overwrite=False):
        self.calls.append((bucket, path, overwrite))
        if self.on_put:
            self.on_put(bucket, path)
        if self.fail_on and self.fail_on(path):
            raise StorageError(bucket, path, "quota exceeded")
        if not overwrite and (bucket, path) in self.objects:
            raise StorageError(bucket, path, "The resource already exists")
        self.objects[(bucket, path)] = data
        self.content_types[(bucket, path)] = content_type
        return self.get_public_url(bucket, path)

    def get_public_url(self, bucket, path):
        return f"https://cdn.test/storage/v1/object/public/{bucket}/{path}"

    def exists(self, bucket, path):
        return (bucket, path) in self.objects

    def delete(self, bucket, path):
        self.objects.pop((bucket, path), None)


class FakeCatalog(CatalogStore):
    def __init__(self, fail: bool = False):
        self.rows: List[Tuple[str, Dict[str, Any]]] = []
        self.fail = fail

    def insert_row(self, table, row):
        if self.fail:
            raise MetadataError(table, "new row violates row-level security policy")
        self.rows.append((table, row))


def _make_image(width: int, height: int, fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    color = (200, 120, 40, 128) if mode == "RGBA" else (200, 120, 40)
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def make_image():
    """Factory returning encoded image bytes of the given size."""
    return _make_image


@pytest.fixture
def jpeg_file():
    def factory(name: str = "beach.jpg", width: int = 1200, height: int = 800, size: Optional[int] = None):
        data = _make_image(width, height)
        return MediaFile(name=name, content_type="image/jpeg", size=size if size is not None else len(data), data=data)
    return factory


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def recorder(catalog):
    return MetadataRecorder(catalog, table="media_library")
