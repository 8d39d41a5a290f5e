"""Google Cloud Storage implementation of the blob service."""

from __future__ import annotations

import logging
import mimetypes
from contextlib import contextmanager
from datetime import datetime
from typing import BinaryIO, Iterator

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import storage as gcs

from ghost_gcs.storage.contracts import BlobService, BlobServiceError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 256 * 1024


def _wrap_error(op: str, key: str, exc: Exception) -> BlobServiceError:
    code = exc.code if isinstance(exc, GoogleAPICallError) else None
    logger.debug("GCS %s failed for %s: %s", op, key, exc)
    return BlobServiceError(str(exc), code=code)


class GcsBlobService(BlobService):
    """Blob service backed by a single GCS bucket.

    Note: Signing URLs needs service account credentials, either a key file or
    impersonation with the "Service Account Token Creator" role. Plain user
    ADC credentials cannot sign.
    """

    def __init__(self, client: gcs.Client, bucket_name: str):
        self._client = client
        self._bucket_name = bucket_name
        self._bucket = client.bucket(bucket_name)

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def _blob(self, key: str) -> gcs.Blob:
        blob = self._bucket.blob(key)
        content_type, _ = mimetypes.guess_type(key)
        if content_type:
            blob.content_type = content_type
        return blob

    def exists(self, key: str) -> bool:
        try:
            return self._bucket.blob(key).exists()
        except Exception as exc:
            raise _wrap_error("exists", key, exc) from exc

    def read_stream(self, key: str) -> Iterator[bytes]:
        try:
            with self._bucket.blob(key).open("rb") as reader:
                for chunk in iter(lambda: reader.read(READ_CHUNK_SIZE), b""):
                    yield chunk
        except Exception as exc:
            raise _wrap_error("read", key, exc) from exc

    @contextmanager
    def write_stream(self, key: str) -> Iterator[BinaryIO]:
        try:
            with self._blob(key).open("wb") as writer:
                yield writer
        except Exception as exc:
            raise _wrap_error("write", key, exc) from exc

    def save(self, key: str, data: bytes) -> None:
        blob = self._blob(key)
        try:
            blob.upload_from_string(data, content_type=blob.content_type)
        except Exception as exc:
            raise _wrap_error("save", key, exc) from exc

    def delete(self, key: str) -> None:
        try:
            self._bucket.blob(key).delete()
        except Exception as exc:
            raise _wrap_error("delete", key, exc) from exc

    def signed_url(self, key: str, *, expires_at: datetime, virtual_hosted: bool) -> str:
        try:
            return self._bucket.blob(key).generate_signed_url(
                version="v4",
                method="GET",
                expiration=expires_at,
                virtual_hosted_style=virtual_hosted,
            )
        except Exception as exc:
            raise _wrap_error("signed_url", key, exc) from exc

    def bucket_exists(self) -> bool:
        try:
            return self._bucket.exists()
        except Exception as exc:
            raise _wrap_error("bucket_exists", self._bucket_name, exc) from exc


__all__ = ["GcsBlobService"]
