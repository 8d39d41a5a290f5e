"""Default host capabilities used when no content host is plugged in."""

from __future__ import annotations

import posixpath
import secrets
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from ghost_gcs.storage.sanitize import sanitize


class DatedHost:
    """Stores uploads under year/month directories, like the Ghost local storage."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def get_target_dir(self) -> str:
        now = self._clock()
        return f"{now:%Y}/{now:%m}"

    def get_unique_file_path(self, record: Mapping[str, Any], dir: str) -> str:
        # Host semantics: "name" is the full original file name
        original = record.get("name") or ""
        ext = record.get("ext") or posixpath.splitext(original)[1]
        stem = original[: -len(ext)] if ext and original.endswith(ext) else original
        stem = sanitize(stem, lowercase=False, strip_diacritics=False) or "file"
        return posixpath.join(dir or "", f"{stem}-{secrets.token_hex(8)}{ext}")


__all__ = ["DatedHost"]
