import io
import re

from PIL import Image

from media_ingest.schemas.media import MediaFile
from media_ingest.services.thumbnails import generate_thumbnail

from conftest import FakeStorage


def test_stores_jpeg_under_thumbnails_folder(storage, jpeg_file):
    url = generate_thumbnail(storage, jpeg_file(), "media", "uploads")

    assert len(storage.calls) == 1
    bucket, path, overwrite = storage.calls[0]
    assert bucket == "media"
    assert re.fullmatch(r"uploads/thumbnails/\d+_\d+\.jpg", path)
    assert overwrite is False
    assert url == storage.get_public_url(bucket, path)
    assert storage.content_types[(bucket, path)] == "image/jpeg"
    with Image.open(io.BytesIO(storage.objects[(bucket, path)])) as img:
        assert img.size == (300, 200)


def test_custom_edge(storage, jpeg_file):
    generate_thumbnail(storage, jpeg_file(width=1000, height=2000), "media", "blog", max_edge=100)
    (key,) = storage.objects
    with Image.open(io.BytesIO(storage.objects[key])) as img:
        assert img.size == (50, 100)


def test_non_image_is_skipped(storage):
    clip = MediaFile(name="clip.mp4", content_type="video/mp4", size=3, data=b"abc")
    assert generate_thumbnail(storage, clip, "media", "uploads") is None
    assert storage.calls == []


def test_decode_failure_resolves_none(storage):
    broken = MediaFile(name="broken.jpg", content_type="image/jpeg", size=3, data=b"abc")
    assert generate_thumbnail(storage, broken, "media", "uploads") is None
    assert storage.calls == []


def test_storage_failure_resolves_none(jpeg_file):
    storage = FakeStorage(fail_on=lambda path: True)
    assert generate_thumbnail(storage, jpeg_file(), "media", "uploads") is None
    assert len(storage.calls) == 1


def test_unexpected_storage_exception_resolves_none(jpeg_file):
    class ResettingStorage(FakeStorage):
        def put_object(self, bucket, path, data, content_type=None, overwrite=False):
            raise ConnectionResetError("connection reset")

    assert generate_thumbnail(ResettingStorage(), jpeg_file(), "media", "uploads") is None
