"""Storage package: GCS storage adapter for Ghost content."""

from ghost_gcs.storage.adapter import GCSStorageAdapter
from ghost_gcs.storage.contracts import (
    AdapterError,
    BlobService,
    BlobServiceError,
    ConfigurationError,
    GCSAdapterError,
    HostContext,
    InvalidInputError,
)
from ghost_gcs.storage.file_ref import FileDescriptor, FileRef, SourceKind
from ghost_gcs.storage.policy import FilenameStrategy, PathPolicy, StorageOptions, build_policy
from ghost_gcs.storage.sanitize import sanitize

__all__ = [
    "AdapterError",
    "BlobService",
    "BlobServiceError",
    "ConfigurationError",
    "FileDescriptor",
    "FileRef",
    "FilenameStrategy",
    "GCSAdapterError",
    "GCSStorageAdapter",
    "HostContext",
    "InvalidInputError",
    "PathPolicy",
    "SourceKind",
    "StorageOptions",
    "build_policy",
    "sanitize",
]
