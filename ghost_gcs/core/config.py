"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from ghost_gcs.storage.policy import StorageOptions


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Google Cloud Storage
    GCS_BUCKET: str = ""
    GCS_PROJECT: Optional[str] = None
    GCS_CREDENTIALS_FILE: Optional[str] = None

    # URLs
    GCS_PROTOCOL: str = "https"
    GCS_HOST: str = "storage.googleapis.com"
    GCS_PREFIX: str = ""
    GCS_VIRTUAL: bool = True
    GCS_PASSTHROUGH: bool = True
    GCS_ADD_PREFIX_TO_URL: bool = False
    GCS_SIGNED: bool = False
    GCS_EXPIRES_MS: int = 24 * 60 * 60 * 1000

    # File names
    GCS_FILENAME: Optional[str] = None
    GCS_TEMPLATE: Optional[str] = None
    GCS_HASH: bool = False
    GCS_HASH_ALGORITHM: str = "md5"
    GCS_HASH_LENGTH: int = 16
    GCS_LOWERCASE: bool = True
    GCS_DEBURR: bool = True

    # Host
    CONTENT_PATH: str = "content"
    CONTENT_TYPES: list[str] = ["images", "media", "files"]

    # Application
    APP_NAME: str = "Ghost GCS Storage Adapter"
    APP_ENV: str = "dev"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    def storage_options(self, type: str = "images") -> StorageOptions:
        """Adapter options for one content type."""
        return StorageOptions(
            bucket=self.GCS_BUCKET or None,
            protocol=self.GCS_PROTOCOL,
            host=self.GCS_HOST,
            prefix=self.GCS_PREFIX,
            type=type,
            virtual=self.GCS_VIRTUAL,
            passthrough=self.GCS_PASSTHROUGH,
            add_prefix_to_url=self.GCS_ADD_PREFIX_TO_URL,
            signed=self.GCS_SIGNED,
            expires=self.GCS_EXPIRES_MS,
            filename=self.GCS_FILENAME,
            template=self.GCS_TEMPLATE,
            hash=self.GCS_HASH,
            hash_algorithm=self.GCS_HASH_ALGORITHM,
            hash_length=self.GCS_HASH_LENGTH,
            lowercase=self.GCS_LOWERCASE,
            deburr=self.GCS_DEBURR,
        )


# Global settings instance
settings = Settings()
