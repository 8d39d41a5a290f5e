"""Adapter options and the resolved path policy."""

from __future__ import annotations

import enum
import hashlib
from dataclasses import dataclass
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ghost_gcs.storage.contracts import ConfigurationError
from ghost_gcs.storage.sanitize import sanitize

DEFAULT_HOST = "storage.googleapis.com"
DEFAULT_CONTENT_PATH = "content"
DEFAULT_EXPIRES_MS = 24 * 60 * 60 * 1000  # 24 hours

# Content path suffixes served by the host
CONTENT_TYPES = (
    "images",
    "media",
    "files",
    "themes",
    "adapters",
    "logs",
    "data",
    "settings",
    "public",
)


class FilenameStrategy(str, enum.Enum):
    """How the stored name of an uploaded file is derived."""

    original = "original"
    originalhash = "originalhash"
    hash = "hash"
    unique = "unique"
    hashunique = "hashunique"
    random = "random"
    delegate = "delegate"
    custom = "custom"

    @classmethod
    def _missing_(cls, value):
        # "ghost" is the historical name of the delegate strategy
        if isinstance(value, str) and value.lower() == "ghost":
            return cls.delegate
        return None


class StorageOptions(BaseModel):
    """Option bag accepted by the adapter. Unset fields keep these defaults."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    bucket: Optional[str] = None
    protocol: str = "https"
    host: Optional[str] = DEFAULT_HOST
    prefix: Optional[str] = ""
    type: str = "images"
    virtual: bool = True
    passthrough: bool = True
    add_prefix_to_url: bool = Field(
        default=False, validation_alias=AliasChoices("add_prefix_to_url", "addPrefixToURL")
    )
    signed: bool = False
    expires: int = DEFAULT_EXPIRES_MS
    filename: Optional[str] = None
    template: Optional[str] = None
    hash: bool = False
    hash_algorithm: str = Field(
        default="md5", validation_alias=AliasChoices("hash_algorithm", "hashAlgorithm")
    )
    hash_length: int = Field(
        default=16, validation_alias=AliasChoices("hash_length", "hashLength")
    )
    lowercase: bool = True
    deburr: bool = Field(
        default=True, validation_alias=AliasChoices("deburr", "ascii_folding", "asciiFolding")
    )


@dataclass(frozen=True, slots=True)
class PathPolicy:
    """Resolved adapter configuration shared by every file operation."""

    bucket: str
    protocol: str
    host: str
    prefix: str
    type: str
    virtual_hosted: bool
    add_bucket_to_path: bool
    add_prefix_to_url: bool
    passthrough: bool
    signed: bool
    expires_ms: int
    filename_strategy: FilenameStrategy
    template: Optional[str]
    hash_algorithm: str
    hash_length: int
    lowercase: bool
    strip_diacritics: bool
    content_path_root: str = DEFAULT_CONTENT_PATH

    def sanitize(self, value: str = "") -> str:
        return sanitize(value, lowercase=self.lowercase, strip_diacritics=self.strip_diacritics)

    @property
    def content_path(self) -> str:
        """Host route the assets of this type are served from, eg: content/images"""
        return f"{self.content_path_root}/{self.type}"


def _resolve_strategy(options: StorageOptions) -> FilenameStrategy:
    if not options.filename:
        return FilenameStrategy.hash if options.hash else FilenameStrategy.original
    try:
        return FilenameStrategy(options.filename.lower())
    except ValueError as exc:
        raise ConfigurationError(f"Unknown filename strategy: {options.filename}") from exc


def build_policy(
    options: StorageOptions | None = None,
    content_path_root: str | None = None,
    **overrides,
) -> PathPolicy:
    """Validate options and derive the URL flags.

    Raises:
        ConfigurationError: Missing bucket, custom strategy without template,
            unknown strategy, content type or hash algorithm, a variable
            length hash algorithm (shake_*), or a non-positive hash length
            or expiry.
    """
    if options is None:
        options = StorageOptions(**overrides)
    elif overrides:
        options = options.model_copy(update=overrides)

    if not options.bucket:
        raise ConfigurationError("Bucket is required")
    if options.type not in CONTENT_TYPES:
        raise ConfigurationError(f"Invalid content type: {options.type}")
    if options.hash_length <= 0:
        raise ConfigurationError("hash_length must be greater than 0")
    if options.expires <= 0:
        raise ConfigurationError("expires must be greater than 0")
    try:
        digest = hashlib.new(options.hash_algorithm)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError(f"Unknown hash algorithm: {options.hash_algorithm}") from exc
    if not digest.digest_size:
        raise ConfigurationError(f"Variable length hash algorithm not supported: {options.hash_algorithm}")

    strategy = _resolve_strategy(options)
    template = options.template or None
    if strategy is FilenameStrategy.custom and not template:
        raise ConfigurationError("Template is required for the custom filename strategy")
    if template is None:
        template = "[hash][ext]" if options.hash else "[name][ext]"

    host = options.host or DEFAULT_HOST
    add_bucket_to_path = False
    add_prefix_to_url = options.add_prefix_to_url
    if host == DEFAULT_HOST:
        # GCS paths always carry the prefix
        add_prefix_to_url = True
        if options.virtual:
            host = f"{options.bucket}.{DEFAULT_HOST}"
        else:
            add_bucket_to_path = True
    if options.signed:
        add_prefix_to_url = True
        if not options.virtual:
            add_bucket_to_path = True

    return PathPolicy(
        bucket=options.bucket,
        protocol=options.protocol,
        host=host,
        prefix=(options.prefix or "").strip("/\\"),
        type=options.type,
        virtual_hosted=options.virtual,
        add_bucket_to_path=add_bucket_to_path,
        add_prefix_to_url=add_prefix_to_url,
        passthrough=options.passthrough,
        signed=options.signed,
        expires_ms=options.expires,
        filename_strategy=strategy,
        template=template,
        hash_algorithm=options.hash_algorithm,
        hash_length=options.hash_length,
        lowercase=options.lowercase,
        strip_diacritics=options.deburr,
        content_path_root=(content_path_root or DEFAULT_CONTENT_PATH).strip("/\\"),
    )


__all__ = [
    "CONTENT_TYPES",
    "DEFAULT_HOST",
    "FilenameStrategy",
    "PathPolicy",
    "StorageOptions",
    "build_policy",
]
