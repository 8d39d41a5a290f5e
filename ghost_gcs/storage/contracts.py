"""Storage interfaces and error types."""

from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any, BinaryIO, Iterator, Mapping, Protocol, runtime_checkable


class GCSAdapterError(Exception):
    """Base class for every error raised by the adapter."""

    code = "ERR_GCS_ADAPTER"


class ConfigurationError(GCSAdapterError):
    """Invalid or missing adapter options. Raised at construction."""


class InvalidInputError(GCSAdapterError):
    """A factory or operation was called without identifying input."""


class AdapterError(GCSAdapterError):
    """Wraps blob service failures with operation context."""

    def __init__(self, op: str, bucket: str | None, key: str | None, message: str):
        self.op = op
        self.bucket = bucket
        self.key = key
        self.message = message
        super().__init__(self.__str__())

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        bucket_repr = self.bucket or "<unknown>"
        key_repr = self.key or "<unknown>"
        return f"{self.op} failed for bucket={bucket_repr} key={key_repr}: {self.message}"


class BlobServiceError(Exception):
    """Failure reported by a blob service, with an HTTP-like status code."""

    def __init__(self, message: str, code: int | None = None):
        self.message = message
        self.code = code
        super().__init__(message)


@runtime_checkable
class BlobService(Protocol):
    """Contract for the object store holding the assets.

    Keys are relative object keys as produced by ``FileRef.relative``.
    Implementations raise ``BlobServiceError`` on failure.
    """

    def exists(self, key: str) -> bool:
        ...

    def read_stream(self, key: str) -> Iterator[bytes]:
        ...

    def write_stream(self, key: str) -> AbstractContextManager[BinaryIO]:
        ...

    def save(self, key: str, data: bytes) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def signed_url(self, key: str, *, expires_at: datetime, virtual_hosted: bool) -> str:
        ...


@runtime_checkable
class HostContext(Protocol):
    """Capabilities borrowed from the content host."""

    def get_target_dir(self) -> str:
        ...

    def get_unique_file_path(self, record: Mapping[str, Any], dir: str) -> str:
        ...


__all__ = [
    "GCSAdapterError",
    "ConfigurationError",
    "InvalidInputError",
    "AdapterError",
    "BlobServiceError",
    "BlobService",
    "HostContext",
]
