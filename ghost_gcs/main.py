"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ghost_gcs.core.config import settings
from ghost_gcs.core.logging import setup_logging
from ghost_gcs.routes import build_content_router, health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    setup_logging()
    if not settings.GCS_BUCKET:
        logger.warning("GCS_BUCKET is not set, content routes will fail")
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Register routers
app.include_router(health_router)
for content_type in settings.CONTENT_TYPES:
    app.include_router(
        build_content_router(content_type),
        prefix=f"/{settings.CONTENT_PATH.strip('/')}/{content_type}",
    )
