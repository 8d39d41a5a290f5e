"""API routes package."""

from ghost_gcs.routes.content import build_content_router
from ghost_gcs.routes.health import router as health_router

__all__ = ["build_content_router", "health_router"]
