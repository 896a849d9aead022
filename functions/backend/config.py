"""
Configuration and settings for the Sponta API backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Firebase (Auth, Firestore, Storage)
    firebase_project_id: Optional[str] = Field(
        default=None, validation_alias="FIREBASE_PROJECT_ID"
    )
    firebase_credentials_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "FIREBASE_CREDENTIALS_PATH", "GOOGLE_APPLICATION_CREDENTIALS"
        ),
    )
    firebase_storage_bucket: Optional[str] = Field(
        default=None, validation_alias="FIREBASE_STORAGE_BUCKET"
    )

    # SQL document store (any SQLAlchemy URL)
    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")

    # S3-compatible storage
    s3_endpoint: Optional[str] = Field(default=None, validation_alias="S3_ENDPOINT")
    s3_region: Optional[str] = Field(default=None, validation_alias="S3_REGION")
    s3_bucket: Optional[str] = Field(default=None, validation_alias="S3_BUCKET")
    aws_access_key_id: Optional[str] = Field(
        default=None, validation_alias="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, validation_alias="AWS_SECRET_ACCESS_KEY"
    )

    # LLM / Gemini
    gemini_api_key: Optional[str] = Field(
        default=None, validation_alias="GEMINI_API_KEY"
    )
    photo_fetch_timeout_seconds: float = Field(
        default=30, validation_alias="PHOTO_FETCH_TIMEOUT_SECONDS"
    )
    # Comma-separated storage hosts completion photo URLs may point at.
    photo_url_hosts: str = Field(
        default="firebasestorage.googleapis.com,storage.googleapis.com",
        validation_alias="PHOTO_URL_HOSTS",
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="SPONTA_USE_IN_MEMORY_BACKENDS"
    )

    @property
    def photo_url_host_list(self) -> list[str]:
        return [host.strip() for host in self.photo_url_hosts.split(",") if host.strip()]

    @property
    def firebase_enabled(self) -> bool:
        return bool(self.firebase_project_id or self.firebase_credentials_path)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
