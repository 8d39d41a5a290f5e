"""Content serve endpoints.

Mounted on the host content path of each type (eg: /content/images), so they
are only reached when the adapter hands out passthrough URLs.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ghost_gcs.deps import get_adapters
from ghost_gcs.storage.adapter import GCSStorageAdapter
from ghost_gcs.storage.contracts import BlobServiceError, InvalidInputError
from ghost_gcs.storage.file_ref import FileRef

logger = logging.getLogger(__name__)

_ERRORS = {
    400: "BadRequestError",
    401: "UnauthorizedError",
    403: "NoPermissionError",
    404: "NotFoundError",
}


def to_http_error(exc: BlobServiceError, ref: FileRef | None) -> HTTPException:
    """Map a blob service failure to the host error for the same status."""
    status = exc.code if exc.code in _ERRORS else 500
    detail = {
        "type": _ERRORS.get(status, "InternalServerError"),
        "message": exc.message,
    }
    if status == 404:
        detail["code"] = "STATIC_FILE_NOT_FOUND"
        detail["property"] = ref.relative() if ref is not None else None
    return HTTPException(status_code=status, detail=detail)


def build_content_router(type: str) -> APIRouter:
    """Router streaming objects of one content type."""
    router = APIRouter(tags=["content"])

    @router.get("/{path:path}", name=f"serve_{type}")
    async def serve(path: str, adapters: dict[str, GCSStorageAdapter] = Depends(get_adapters)):
        adapter = adapters[type]
        ref = None
        try:
            ref = adapter.from_path("/" + path)
            chunks = ref.read_stream()
            # Pull the first chunk here so a missing object fails before the response starts
            first = await asyncio.to_thread(next, chunks, b"")
        except InvalidInputError as exc:
            raise HTTPException(
                status_code=400, detail={"type": "BadRequestError", "message": str(exc)}
            ) from exc
        except BlobServiceError as exc:
            logger.info("Serve failed for %s: %s", path, exc.message)
            raise to_http_error(exc, ref) from exc
        media_type, _ = mimetypes.guess_type(ref.base)
        return StreamingResponse(
            itertools.chain([first], chunks),
            media_type=media_type or "application/octet-stream",
        )

    return router


__all__ = ["build_content_router", "to_http_error"]
