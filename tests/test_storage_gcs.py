from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import Forbidden, NotFound

from ghost_gcs.core.config import Settings
from ghost_gcs.storage.adapter import GCSStorageAdapter
from ghost_gcs.storage.contracts import BlobServiceError, ConfigurationError
from ghost_gcs.storage.factory import build_adapters, build_client
from ghost_gcs.storage.gcs_impl import GcsBlobService


def _service():
    client = MagicMock()
    service = GcsBlobService(client, "uploads")
    blob = client.bucket.return_value.blob.return_value
    return service, client, blob


def test_binds_bucket():
    service, client, _ = _service()

    client.bucket.assert_called_once_with("uploads")
    assert service.bucket_name == "uploads"


def test_exists_happy_path():
    service, client, blob = _service()
    blob.exists.return_value = True

    assert service.exists("images/logo.png") is True
    client.bucket.return_value.blob.assert_called_with("images/logo.png")


def test_read_stream_yields_chunks():
    service, _, blob = _service()
    reader = MagicMock()
    reader.read.side_effect = [b"ab", b"cd", b""]
    blob.open.return_value.__enter__.return_value = reader

    assert list(service.read_stream("images/logo.png")) == [b"ab", b"cd"]
    blob.open.assert_called_once_with("rb")


def test_read_stream_not_found_keeps_status():
    service, _, blob = _service()
    blob.open.side_effect = NotFound("missing")

    with pytest.raises(BlobServiceError) as excinfo:
        list(service.read_stream("images/missing.png"))

    assert excinfo.value.code == 404
    assert "missing" in excinfo.value.message


def test_write_stream_sets_content_type():
    service, _, blob = _service()
    writer = MagicMock()
    blob.open.return_value.__enter__.return_value = writer

    with service.write_stream("images/logo.png") as sink:
        sink.write(b"data")

    assert blob.content_type == "image/png"
    blob.open.assert_called_once_with("wb")
    writer.write.assert_called_once_with(b"data")


def test_write_stream_error_mapping():
    service, _, blob = _service()
    blob.open.return_value.__enter__.return_value.write.side_effect = Forbidden("denied")

    with pytest.raises(BlobServiceError) as excinfo:
        with service.write_stream("images/logo.png") as sink:
            sink.write(b"data")

    assert excinfo.value.code == 403


def test_save_uploads_bytes():
    service, _, blob = _service()

    service.save("media/clip.mp4", b"data")

    blob.upload_from_string.assert_called_once_with(b"data", content_type="video/mp4")


def test_delete_not_found():
    service, _, blob = _service()
    blob.delete.side_effect = NotFound("gone")

    with pytest.raises(BlobServiceError) as excinfo:
        service.delete("images/logo.png")

    assert excinfo.value.code == 404


def test_generic_error_has_no_code():
    service, _, blob = _service()
    blob.exists.side_effect = RuntimeError("boom")

    with pytest.raises(BlobServiceError) as excinfo:
        service.exists("images/logo.png")

    assert excinfo.value.code is None
    assert "boom" in excinfo.value.message


def test_signed_url_happy_path():
    service, _, blob = _service()
    blob.generate_signed_url.return_value = "https://signed-url"
    expires_at = datetime(2025, 5, 1, tzinfo=timezone.utc)

    url = service.signed_url("images/logo.png", expires_at=expires_at, virtual_hosted=True)

    assert url == "https://signed-url"
    blob.generate_signed_url.assert_called_once_with(
        version="v4", method="GET", expiration=expires_at, virtual_hosted_style=True
    )


def test_bucket_exists():
    service, client, _ = _service()
    client.bucket.return_value.exists.return_value = False

    assert service.bucket_exists() is False


def test_factory_builds_one_adapter_per_type():
    blobs = MagicMock()
    settings = Settings(GCS_BUCKET="uploads", GCS_PREFIX="ghost", CONTENT_TYPES=["images", "media"])

    adapters = build_adapters(settings, blobs=blobs)

    assert set(adapters) == {"images", "media"}
    assert all(isinstance(adapter, GCSStorageAdapter) for adapter in adapters.values())
    assert adapters["media"].policy.type == "media"
    assert adapters["media"].policy.prefix == "ghost"
    assert adapters["images"].blobs is adapters["media"].blobs is blobs


def test_factory_requires_bucket():
    with pytest.raises(ConfigurationError):
        build_adapters(Settings(GCS_BUCKET=""), blobs=MagicMock())


def test_build_client_uses_credentials_file(monkeypatch):
    fake_client = MagicMock()
    monkeypatch.setattr("ghost_gcs.storage.factory.gcs.Client", fake_client)

    build_client(Settings(GCS_BUCKET="uploads", GCS_CREDENTIALS_FILE="/keys/sa.json", GCS_PROJECT="proj"))
    fake_client.from_service_account_json.assert_called_once_with("/keys/sa.json", project="proj")

    build_client(Settings(GCS_BUCKET="uploads", GCS_PROJECT="proj"))
    fake_client.assert_called_once_with(project="proj")
