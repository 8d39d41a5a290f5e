"""Factory for building adapters from environment configuration."""

from __future__ import annotations

import logging

from google.cloud import storage as gcs

from ghost_gcs.core.config import Settings, settings as default_settings
from ghost_gcs.storage.adapter import GCSStorageAdapter
from ghost_gcs.storage.contracts import HostContext
from ghost_gcs.storage.gcs_impl import GcsBlobService
from ghost_gcs.storage.policy import build_policy

logger = logging.getLogger(__name__)


def build_client(settings: Settings) -> gcs.Client:
    """Build a GCS client.

    Uses the service account key file when GCS_CREDENTIALS_FILE is set,
    application default credentials otherwise.
    """
    if settings.GCS_CREDENTIALS_FILE:
        return gcs.Client.from_service_account_json(
            settings.GCS_CREDENTIALS_FILE, project=settings.GCS_PROJECT
        )
    if settings.GCS_PROJECT:
        return gcs.Client(project=settings.GCS_PROJECT)
    return gcs.Client()


def build_blob_service(settings: Settings | None = None) -> GcsBlobService:
    settings = settings or default_settings
    return GcsBlobService(build_client(settings), settings.GCS_BUCKET)


def build_adapters(
    settings: Settings | None = None,
    *,
    blobs: GcsBlobService | None = None,
    host: HostContext | None = None,
) -> dict[str, GCSStorageAdapter]:
    """Build one adapter per configured content type, sharing one client.

    Raises:
        ConfigurationError: If the options are invalid (eg: no bucket).
    """
    settings = settings or default_settings
    policies = {
        type: build_policy(settings.storage_options(type), settings.CONTENT_PATH)
        for type in settings.CONTENT_TYPES
    }
    blobs = blobs or build_blob_service(settings)
    adapters = {
        type: GCSStorageAdapter(policy, blobs, host) for type, policy in policies.items()
    }
    logger.info(
        "Built GCS adapters for %s (bucket=%s)", ", ".join(adapters), settings.GCS_BUCKET
    )
    return adapters


__all__ = ["build_adapters", "build_blob_service", "build_client"]
