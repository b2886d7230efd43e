from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import ResourceExistsError, ServiceRequestError

from media_ingest.errors import StorageError
from media_ingest.storage.blob_provider import BlobStorageProvider
from media_ingest.storage.local_provider import LocalStorageProvider
from media_ingest.storage.supabase_provider import SupabaseStorageProvider


@pytest.fixture
def local(tmp_path):
    return LocalStorageProvider(base_dir=str(tmp_path), public_base_url="http://localhost:8000/")


def test_local_put_returns_public_url(local, tmp_path):
    url = local.put_object("media", "uploads/1_2.jpg", b"jpeg-bytes", "image/jpeg")

    assert url == "http://localhost:8000/media/local/media/uploads/1_2.jpg"
    assert (tmp_path / "media" / "uploads" / "1_2.jpg").read_bytes() == b"jpeg-bytes"
    assert local.exists("media", "uploads/1_2.jpg")


def test_local_create_refuses_existing_key(local):
    local.put_object("media", "uploads/a.jpg", b"first")
    with pytest.raises(StorageError) as exc_info:
        local.put_object("media", "uploads/a.jpg", b"second")
    assert "already exists" in str(exc_info.value)
    assert local._get_path("media", "uploads/a.jpg").read_bytes() == b"first"


def test_local_overwrite_replaces(local):
    local.put_object("media", "sections/hero.jpg", b"old", overwrite=True)
    local.put_object("media", "sections/hero.jpg", b"new", overwrite=True)
    assert local._get_path("media", "sections/hero.jpg").read_bytes() == b"new"


def test_local_paths_stay_inside_base_dir(local, tmp_path):
    local.put_object("media", "../../escape.txt", b"x")
    assert local._get_path("media", "../../escape.txt").resolve().is_relative_to(tmp_path.resolve())


def test_local_delete(local):
    local.put_object("media", "uploads/gone.jpg", b"x")
    local.delete("media", "uploads/gone.jpg")
    local.delete("media", "uploads/gone.jpg")
    assert not local.exists("media", "uploads/gone.jpg")


def test_supabase_put_passes_upsert_flag():
    client = MagicMock()
    bucket_api = client.storage.from_.return_value
    bucket_api.get_public_url.return_value = "https://x.supabase.co/storage/v1/object/public/media/uploads/1_2.jpg"
    provider = SupabaseStorageProvider(client)

    url = provider.put_object("media", "/uploads/1_2.jpg", b"data", "image/jpeg")

    client.storage.from_.assert_called_with("media")
    kwargs = bucket_api.upload.call_args.kwargs
    assert kwargs["path"] == "uploads/1_2.jpg"
    assert kwargs["file"] == b"data"
    assert kwargs["file_options"]["upsert"] == "false"
    assert kwargs["file_options"]["content-type"] == "image/jpeg"
    assert url.endswith("/media/uploads/1_2.jpg")

    provider.put_object("media", "sections/hero.jpg", b"data", "image/jpeg", overwrite=True)
    assert bucket_api.upload.call_args.kwargs["file_options"]["upsert"] == "true"


def test_supabase_put_failure_raises_storage_error():
    client = MagicMock()
    client.storage.from_.return_value.upload.side_effect = RuntimeError("The resource already exists")
    with pytest.raises(StorageError) as exc_info:
        SupabaseStorageProvider(client).put_object("media", "uploads/1_2.jpg", b"data")
    assert exc_info.value.bucket == "media"
    assert exc_info.value.path == "uploads/1_2.jpg"


def test_blob_put_respects_overwrite():
    service = MagicMock()
    blob = service.get_blob_client.return_value
    blob.url = "https://acct.blob.core.windows.net/media/uploads/1_2.jpg"
    provider = BlobStorageProvider(service)

    assert provider.put_object("media", "uploads/1_2.jpg", b"data", "image/jpeg") == blob.url
    service.get_blob_client.assert_called_with("media", "uploads/1_2.jpg")
    assert blob.upload_blob.call_args.kwargs["overwrite"] is False


def test_blob_existing_key_maps_to_storage_error():
    service = MagicMock()
    service.get_blob_client.return_value.upload_blob.side_effect = ResourceExistsError("exists")
    with pytest.raises(StorageError, match="already exists"):
        BlobStorageProvider(service).put_object("media", "uploads/1_2.jpg", b"data")


def test_blob_network_error_maps_to_storage_error():
    service = MagicMock()
    service.get_blob_client.return_value.upload_blob.side_effect = ServiceRequestError("timeout")
    with pytest.raises(StorageError):
        BlobStorageProvider(service).put_object("media", "uploads/1_2.jpg", b"data")
