"""Pytest configuration and fixtures."""

import hashlib
import os

# Keep the app settings independent from the developer environment
os.environ["GCS_BUCKET"] = "bucket"

from contextlib import contextmanager
from io import BytesIO

import pytest

from ghost_gcs.storage.adapter import GCSStorageAdapter
from ghost_gcs.storage.contracts import BlobServiceError
from ghost_gcs.storage.policy import build_policy


class MemoryBlobService:
    """In-memory blob service. ``fail`` maps an operation name to the error it raises."""

    def __init__(self):
        self.objects = {}
        self.fail = {}
        self.signed_calls = []
        self.bucket_ok = True

    def _check(self, op):
        if op in self.fail:
            raise self.fail[op]

    def exists(self, key):
        self._check("exists")
        return key in self.objects

    def read_stream(self, key):
        self._check("read")
        if key not in self.objects:
            raise BlobServiceError(f"No such object: {key}", code=404)
        data = self.objects[key]
        for start in range(0, len(data), 256):
            yield data[start : start + 256]

    @contextmanager
    def write_stream(self, key):
        self._check("write")
        sink = BytesIO()
        yield sink
        self.objects[key] = sink.getvalue()

    def save(self, key, data):
        self._check("save")
        self.objects[key] = bytes(data)

    def delete(self, key):
        self._check("delete")
        if key not in self.objects:
            raise BlobServiceError(f"No such object: {key}", code=404)
        del self.objects[key]

    def signed_url(self, key, *, expires_at, virtual_hosted):
        self._check("signed_url")
        self.signed_calls.append((key, expires_at, virtual_hosted))
        return f"https://signed.example/{key}?X-Goog-Expires={int(expires_at.timestamp())}"

    def bucket_exists(self):
        return self.bucket_ok


class FixedHost:
    """Host stub with a fixed target dir and predictable unique names."""

    def __init__(self, target_dir="2025/05"):
        self.target_dir = target_dir
        self.records = []

    def get_target_dir(self):
        return self.target_dir

    def get_unique_file_path(self, record, dir):
        self.records.append((dict(record), dir))
        stem = record["name"][: -len(record["ext"])] if record["ext"] else record["name"]
        return f"{dir}/{stem}-unique{record['ext']}"


@pytest.fixture
def blobs():
    return MemoryBlobService()


@pytest.fixture
def host():
    return FixedHost()


@pytest.fixture
def make_policy():
    """Build a policy for bucket "bucket" with option overrides."""

    def _make(**overrides):
        overrides.setdefault("bucket", "bucket")
        return build_policy(**overrides)

    return _make


@pytest.fixture
def policy(make_policy):
    return make_policy()


@pytest.fixture
def make_adapter(make_policy, blobs, host):
    def _make(**overrides):
        return GCSStorageAdapter(make_policy(**overrides), blobs, host)

    return _make


@pytest.fixture
def adapter(make_adapter):
    return make_adapter()


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"fake image data" * 64


@pytest.fixture
def md5_tail(png_bytes):
    return hashlib.md5(png_bytes).hexdigest()[-16:]


@pytest.fixture
def image_file(tmp_path, png_bytes):
    """A local upload as the host hands it over: a temp file without extension."""
    path = tmp_path / "1dcfb58793ac8c55126faf8f0baed066"
    path.write_bytes(png_bytes)
    return str(path)


@pytest.fixture
def upload(image_file):
    return {"name": "logo.png", "path": image_file, "mimetype": "image/png"}
