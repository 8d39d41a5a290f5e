"""Health check endpoints."""

import asyncio
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ghost_gcs import deps

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check():
    """Readiness probe - checks adapter configuration and bucket access."""
    checks = {}
    all_ok = True

    # Check configuration
    try:
        adapters = deps.get_adapters()
        checks["config"] = "ok"
    except Exception as e:
        checks["config"] = f"error: {e}"
        adapters = None
        all_ok = False

    # Check storage
    if adapters:
        blobs = next(iter(adapters.values())).blobs
        try:
            if await asyncio.to_thread(blobs.bucket_exists):
                checks["storage"] = "ok"
            else:
                checks["storage"] = "bucket not found"
                all_ok = False
        except Exception as e:
            checks["storage"] = f"error: {e}"
            all_ok = False
    else:
        checks["storage"] = "not configured"
        all_ok = False

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
    )
