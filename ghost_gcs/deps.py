"""Shared dependencies for FastAPI routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ghost_gcs.storage.adapter import GCSStorageAdapter

_adapters: "dict[str, GCSStorageAdapter] | None" = None


def get_adapters() -> "dict[str, GCSStorageAdapter]":
    """Get or lazily initialize the adapters, keyed by content type.

    Lazy initialization avoids failures at import time when GCS credentials
    are unavailable.
    """
    global _adapters
    if _adapters is None:
        from ghost_gcs.storage.factory import build_adapters

        _adapters = build_adapters()
    return _adapters


def get_adapter(type: str) -> "GCSStorageAdapter":
    return get_adapters()[type]


__all__ = ["get_adapters", "get_adapter"]
