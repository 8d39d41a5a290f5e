"""Storage adapter exposed to the content host."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ghost_gcs.storage.contracts import (
    AdapterError,
    BlobService,
    BlobServiceError,
    HostContext,
    InvalidInputError,
)
from ghost_gcs.storage.file_ref import FileDescriptor, FileRef
from ghost_gcs.storage.host import DatedHost
from ghost_gcs.storage.policy import PathPolicy
from ghost_gcs.storage.sanitize import MAX_NAME_SIZE

logger = logging.getLogger(__name__)

NOT_FOUND = 404


class GCSStorageAdapter:
    """Stores one content type (images, media, files, ...) in a GCS bucket.

    Usage:
        policy = build_policy(StorageOptions(bucket="my-bucket", type="images"))
        adapter = GCSStorageAdapter(policy, GcsBlobService(client, "my-bucket"))

        url = await adapter.save({"name": "logo.png", "path": "/tmp/upload"})
        key = adapter.url_to_path(url)  # "images/2025/05/logo.png"
    """

    def __init__(
        self,
        policy: PathPolicy,
        blobs: BlobService,
        host: HostContext | None = None,
    ):
        self.policy = policy
        self.blobs = blobs
        self.host = host or DatedHost()

    @property
    def type(self) -> str:
        return self.policy.type

    def _error(self, op: str, ref: FileRef | None, exc: Exception) -> AdapterError:
        key = ref.relative() if ref is not None else None
        message = getattr(exc, "message", None) or str(exc)
        logger.warning("GCS %s failed for %s: %s", op, key, message)
        return AdapterError(op=op, bucket=self.policy.bucket, key=key, message=message)

    def _check_key(self, ref: FileRef) -> None:
        key = ref.relative()
        if len(key.encode("utf-8")) > MAX_NAME_SIZE:
            raise InvalidInputError(f"Object name exceeds {MAX_NAME_SIZE} bytes: {key[:64]}...")

    # ---------
    # FileRefs
    # ---------
    def from_path(self, path: str, dir: str | None = None) -> FileRef:
        return FileRef.from_path(path, self.policy, dir, blobs=self.blobs, host=self.host)

    def from_file(self, file: FileDescriptor | Mapping[str, Any], dir: str | None = None) -> FileRef:
        return FileRef.from_file(file, self.policy, dir, blobs=self.blobs, host=self.host)

    def from_url(self, url: str) -> FileRef:
        return FileRef.from_url(url, self.policy, blobs=self.blobs, host=self.host)

    def get_target_dir(self) -> str:
        return self.host.get_target_dir()

    # -----------
    # Host API
    # -----------
    async def exists(self, path: str, dir: str | None = None) -> bool:
        """Check if a file exists. Used by the image size middleware."""
        ref = self.from_path(path, dir)
        try:
            return await ref.exists()
        except BlobServiceError as exc:
            raise self._error("exists", ref, exc) from exc

    async def read(self, path: str | Mapping[str, Any]) -> bytes:
        """Read a whole object into memory. Meant for small files.

        Accepts the path itself or the host's ``{"path": ...}`` options.
        """
        if isinstance(path, Mapping):
            path = path.get("path")
        ref = self.from_path(path)
        try:
            return await ref.read()
        except BlobServiceError as exc:
            raise self._error("read", ref, exc) from exc

    async def save(self, file: FileDescriptor | Mapping[str, Any], dir: str | None = None) -> str:
        """Upload a local file and return the URL to serve it from."""
        ref = self.from_file(file, dir)
        try:
            await ref.resolve_computed_name()
            self._check_key(ref)
            await ref.upload()
            url = await ref.serve()
        except (BlobServiceError, OSError) as exc:
            raise self._error("save", ref, exc) from exc
        logger.info("Saved %s to gcs://%s/%s", ref.base, self.policy.bucket, ref.relative())
        return url

    async def save_raw(self, data: bytes, path: str) -> str:
        """Write a buffer to ``path`` and return the URL to serve it from."""
        ref = self.from_path(path)
        self._check_key(ref)
        try:
            await ref.write(data)
            url = await ref.serve()
        except BlobServiceError as exc:
            raise self._error("save_raw", ref, exc) from exc
        logger.info("Saved %d bytes to gcs://%s/%s", len(data), self.policy.bucket, ref.relative())
        return url

    async def delete(self, path: str, dir: str | None = None) -> None:
        """Delete an object. A missing object counts as deleted."""
        ref = self.from_path(path, dir)
        try:
            await ref.delete()
        except BlobServiceError as exc:
            if exc.code == NOT_FOUND:
                logger.debug("Delete of missing object %s ignored", ref.relative())
                return
            raise self._error("delete", ref, exc) from exc
        logger.info("Deleted gcs://%s/%s", self.policy.bucket, ref.relative())

    def url_to_path(self, url: str) -> str:
        """Convert a served URL (returned by save/save_raw) back to its object key."""
        return self.from_url(url).relative()

    def sanitize(self, value: str = "") -> str:
        return self.policy.sanitize(value)

    def sanitize_file_name(self, value: str) -> str:
        return self.sanitize(value)

    def get_sanitized_file_name(self, value: str) -> str:
        return self.sanitize(value)


__all__ = ["GCSStorageAdapter"]
