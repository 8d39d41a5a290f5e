"""Per-operation file reference.

A ``FileRef`` normalizes one input (a path, an uploaded file descriptor or a
previously served URL) into ``dir`` segments and a base name, computes the
stored name and renders every URL shape the adapter hands back to the host.

Object keys always look like ``prefix/type/dir/name``; the fixed segments
(content root, type, prefix, bucket) never end up in ``dir``.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import posixpath
import shutil
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, Mapping, Optional, Sequence
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict

from ghost_gcs.storage.contracts import BlobService, HostContext, InvalidInputError
from ghost_gcs.storage.host import DatedHost
from ghost_gcs.storage.naming import (
    CHUNK_SIZE,
    content_digest,
    content_digest_with_salt,
    random_hex,
    render_template,
    template_keys,
)
from ghost_gcs.storage.policy import FilenameStrategy, PathPolicy
from ghost_gcs.storage.sanitize import split_path

logger = logging.getLogger(__name__)


class SourceKind(str, enum.Enum):
    """Where a FileRef came from. Selects the segment stripping rules."""

    PATH = "path"
    FILE = "file"
    URL = "url"


class FileDescriptor(BaseModel):
    """Uploaded file as handed over by the host.

    Eg: ``{"name": "logo.png", "path": "/tmp/1dcfb58793ac8c55126faf8f0baed066"}``
    Extra fields (``originalname``, ``mimetype``, ...) are kept and can be
    referenced from filename templates.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    path: Optional[str] = None
    ext: Optional[str] = None
    base: Optional[str] = None
    dir: Optional[str] = None


def _join(*parts: str) -> str:
    return "/".join(part for part in parts if part)


def _strip_leading(segments: list[str], value: str, policy: PathPolicy) -> list[str]:
    """Drop ``value`` from the front of ``segments`` if it is there."""
    if not value:
        return segments
    for candidate in (split_path(value), split_path(policy.sanitize(value))):
        size = len(candidate)
        if size and segments[:size] == candidate:
            return segments[size:]
    return segments


def _has_leading(segments: list[str], value: str, policy: PathPolicy) -> bool:
    return _strip_leading(segments, value, policy) is not segments


def _strip_fixed_segments(
    segments: list[str], policy: PathPolicy, kind: SourceKind
) -> list[str]:
    root = split_path(policy.content_path_root)
    content_shape = (root and segments[: len(root)] == root) or (
        policy.passthrough and kind is not SourceKind.URL
    )
    # A path-style bucket can share its name with the content root
    if kind is SourceKind.URL and policy.add_bucket_to_path and _has_leading(segments, policy.bucket, policy):
        content_shape = False
    # Mirrors passthrough(): /content/type/[prefix]/dir/name
    if content_shape:
        segments = _strip_leading(segments, policy.content_path_root, policy)
        segments = _strip_leading(segments, policy.type, policy)
        if policy.add_prefix_to_url:
            segments = _strip_leading(segments, policy.prefix, policy)
        return segments
    # Mirrors absolute(): host/[bucket]/[prefix]/type/dir/name
    if policy.add_bucket_to_path:
        segments = _strip_leading(segments, policy.bucket, policy)
    if policy.add_prefix_to_url:
        segments = _strip_leading(segments, policy.prefix, policy)
    return _strip_leading(segments, policy.type, policy)


class FileRef:
    """One file transfer or lookup. Never shared between operations."""

    def __init__(
        self,
        policy: PathPolicy,
        *,
        name: str,
        ext: str,
        base: str,
        dir: Sequence[str] = (),
        local_path: str | None = None,
        source_kind: SourceKind = SourceKind.PATH,
        fields: Mapping[str, Any] | None = None,
        blobs: BlobService | None = None,
        host: HostContext | None = None,
    ):
        self.policy = policy
        self.name = name
        self.ext = ext
        self.base = base
        self.dir = tuple(dir)
        self.local_path = local_path
        self.source_kind = source_kind
        self.fields = dict(fields or {})
        self.computed: str | None = None
        self._blobs = blobs
        self._host = host

    def __repr__(self) -> str:
        return f"FileRef({self.source_kind.value}, {self.relative()!r})"

    # ---------
    # Factories
    # ---------
    @classmethod
    def _build(
        cls,
        policy: PathPolicy,
        base: str,
        raw_dir: str | None,
        kind: SourceKind,
        *,
        ext: str | None = None,
        local_path: str | None = None,
        fields: Mapping[str, Any] | None = None,
        blobs: BlobService | None = None,
        host: HostContext | None = None,
    ) -> "FileRef":
        host = host or DatedHost()
        if raw_dir or kind is SourceKind.URL:
            segments = _strip_fixed_segments(split_path(raw_dir), policy, kind)
        else:
            segments = split_path(host.get_target_dir())
        if ext is None:
            ext = posixpath.splitext(base)[1]
        name = base[: -len(ext)] if ext and base.lower().endswith(ext.lower()) else base
        return cls(
            policy,
            name=name,
            ext=ext,
            base=base,
            dir=segments,
            local_path=local_path,
            source_kind=kind,
            fields=fields,
            blobs=blobs,
            host=host,
        )

    @classmethod
    def from_path(
        cls,
        path: str,
        policy: PathPolicy,
        dir: str | None = None,
        *,
        blobs: BlobService | None = None,
        host: HostContext | None = None,
    ) -> "FileRef":
        """Eg: ``/size/w1000/2025/05/962ddac76cbed183.png``"""
        if not path:
            raise InvalidInputError("Path is required")
        segments = split_path(path)
        if not segments:
            raise InvalidInputError(f"Path has no file name: {path!r}")
        parsed_dir = "/".join(segments[:-1])
        # A leading slash means "root", which is an explicit (empty) directory
        if not parsed_dir and path[:1] in ("/", "\\"):
            parsed_dir = "/"
        return cls._build(
            policy,
            segments[-1],
            dir if dir is not None else parsed_dir,
            SourceKind.PATH,
            blobs=blobs,
            host=host,
        )

    @classmethod
    def from_file(
        cls,
        descriptor: FileDescriptor | Mapping[str, Any],
        policy: PathPolicy,
        dir: str | None = None,
        *,
        blobs: BlobService | None = None,
        host: HostContext | None = None,
    ) -> "FileRef":
        """Eg: ``{"name": "logo.png", "path": "/tmp/1dcfb58793ac8c55126faf8f0baed066"}``"""
        if not descriptor:
            raise InvalidInputError("File object is required")
        if not isinstance(descriptor, FileDescriptor):
            if not descriptor.get("name"):
                raise InvalidInputError("File name is required")
            descriptor = FileDescriptor.model_validate(dict(descriptor))
        elif not descriptor.name:
            raise InvalidInputError("File name is required")
        base = descriptor.base or descriptor.name
        return cls._build(
            policy,
            base,
            dir if dir is not None else descriptor.dir,
            SourceKind.FILE,
            ext=descriptor.ext,
            local_path=descriptor.path,
            fields=descriptor.model_extra,
            blobs=blobs,
            host=host,
        )

    @classmethod
    def from_url(
        cls,
        url_or_path: str,
        policy: PathPolicy,
        *,
        blobs: BlobService | None = None,
        host: HostContext | None = None,
    ) -> "FileRef":
        """Eg: ``http://localhost:2368/content/media/2025/05/ac7eda454295301a.mp4``

        A bare path (``/content/images/2025/05/7a472491071c0b5c.png``) is
        treated like ``from_path``.
        """
        if not url_or_path:
            raise InvalidInputError("URL is required")
        if "://" not in url_or_path:
            return cls.from_path(url_or_path, policy, blobs=blobs, host=host)
        segments = split_path(urlsplit(url_or_path).path)
        if not segments:
            raise InvalidInputError(f"URL has no file name: {url_or_path!r}")
        return cls._build(
            policy,
            segments[-1],
            "/".join(segments[:-1]),
            SourceKind.URL,
            blobs=blobs,
            host=host,
        )

    # ------------------
    # Name computation
    # ------------------
    def record(self) -> dict[str, Any]:
        """Fields readable from filename templates."""
        return {
            **self.fields,
            "name": self.name,
            "base": self.base,
            "ext": self.ext,
            "dir": "/".join(self.dir),
            "path": self.local_path,
        }

    async def _hash(self, salted: bool = False) -> str:
        if not self.local_path:
            raise InvalidInputError(f"No local file to hash for {self.base!r}")
        policy = self.policy
        digest = content_digest_with_salt if salted else content_digest
        return await asyncio.to_thread(
            digest, self.local_path, policy.hash_algorithm, policy.hash_length
        )

    def _random(self) -> str:
        return random_hex(self.policy.hash_length)

    async def resolve_computed_name(self) -> str:
        """Derive the stored base name from the filename strategy."""
        strategy = self.policy.filename_strategy
        name, ext = self.name, self.ext
        if strategy is FilenameStrategy.original:
            base = self.base
        elif strategy is FilenameStrategy.originalhash:
            base = f"{name}-{await self._hash()}{ext}"
        elif strategy is FilenameStrategy.hash:
            base = f"{await self._hash()}{ext}"
        elif strategy is FilenameStrategy.unique:
            base = f"{name}-{self._random()}{ext}"
        elif strategy is FilenameStrategy.hashunique:
            base = f"{await self._hash(salted=True)}{ext}"
        elif strategy is FilenameStrategy.random:
            base = f"{self._random()}{ext}"
        elif strategy is FilenameStrategy.delegate:
            # The host expects "name" to hold the full original file name
            record = {**self.record(), "name": self.base, "base": self.name}
            host = self._host or DatedHost()
            base = posixpath.basename(host.get_unique_file_path(record, "/".join(self.dir)))
        else:
            template = self.policy.template or ""
            hash_value = await self._hash() if "hash" in template_keys(template) else None
            base = render_template(template, self.record(), hash_value=hash_value, random_value=self._random)
        self.computed = self.policy.sanitize(base)
        logger.debug("Computed name %s for %s (%s)", self.computed, self.base, strategy.value)
        return self.computed

    # -----------
    # Renderers
    # -----------
    @property
    def final_name(self) -> str:
        return self.computed or self.base

    def _url_prefix(self) -> str:
        policy = self.policy
        return policy.prefix if policy.add_prefix_to_url else ""

    def relative(self) -> str:
        """Object key in the bucket. Always carries prefix and type."""
        policy = self.policy
        return policy.sanitize(_join(policy.prefix, policy.type, *self.dir, self.final_name))

    def absolute(self) -> str:
        """Absolute URL to the bucket or the configured hostname."""
        policy = self.policy
        path = _join(
            policy.host,
            policy.bucket if policy.add_bucket_to_path else "",
            self._url_prefix(),
            policy.type,
            *self.dir,
            self.final_name,
        )
        return policy.sanitize(f"{policy.protocol}://{path}")

    def passthrough(self) -> str:
        """Host-relative URL served from the content path."""
        policy = self.policy
        path = _join(
            policy.content_path_root,
            policy.type,
            self._url_prefix(),
            *self.dir,
            self.final_name,
        )
        return policy.sanitize("/" + path)

    async def signed_url(self) -> str:
        """V4 signed read URL valid for ``expires_ms``.

        The blob service enforces the 7 day maximum.
        """
        policy = self.policy
        expires_at = datetime.now(timezone.utc) + timedelta(milliseconds=policy.expires_ms)
        return await asyncio.to_thread(
            self.blobs.signed_url,
            self.relative(),
            expires_at=expires_at,
            virtual_hosted=policy.virtual_hosted,
        )

    async def serve(self) -> str:
        """URL handed back to the host after a save."""
        if self.policy.signed:
            return await self.signed_url()
        if self.policy.passthrough:
            return self.passthrough()
        return self.absolute()

    # ----------------
    # Blob operations
    # ----------------
    @property
    def blobs(self) -> BlobService:
        if self._blobs is None:
            raise InvalidInputError(f"No blob service bound to {self.base!r}")
        return self._blobs

    async def exists(self) -> bool:
        return await asyncio.to_thread(self.blobs.exists, self.relative())

    def read_stream(self) -> Iterator[bytes]:
        return self.blobs.read_stream(self.relative())

    async def read(self) -> bytes:
        key = self.relative()
        return await asyncio.to_thread(lambda: b"".join(self.blobs.read_stream(key)))

    async def write(self, data: bytes) -> None:
        await asyncio.to_thread(self.blobs.save, self.relative(), data)

    def _copy_local(self, key: str) -> None:
        with open(self.local_path, "rb") as source, self.blobs.write_stream(key) as sink:
            shutil.copyfileobj(source, sink, CHUNK_SIZE)

    async def upload(self) -> None:
        """Stream the local file to the bucket under its computed name."""
        if not self.local_path:
            raise InvalidInputError(f"No local file to upload for {self.base!r}")
        if self.computed is None:
            await self.resolve_computed_name()
        await asyncio.to_thread(self._copy_local, self.relative())

    async def delete(self) -> None:
        await asyncio.to_thread(self.blobs.delete, self.relative())


__all__ = ["FileDescriptor", "FileRef", "SourceKind"]
