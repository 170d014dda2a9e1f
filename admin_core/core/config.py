# File: admin_core/core/config.py
"""
Configuration settings for the admin core.

This module defines settings using Pydantic's BaseSettings, which supports
environment variable loading and validation. The storage backend is chosen
from DATABASE_TYPE exactly once, when the service factory is built.
"""

from typing import Any, Dict, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_DATABASE_TYPES = ("postgres", "mongodb")


class Settings(BaseSettings):
    """
    Settings loaded from environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    PROJECT_NAME: str = "Crowdfund Admin Core"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage backend selection
    DATABASE_TYPE: str = "postgres"

    # Relational backend (SQLAlchemy async URL)
    DATABASE_URL: str = "sqlite+aiosqlite:///./admin_core.db"
    DB_ECHO: bool = False

    # Document backend
    MONGODB_URI: Optional[str] = None
    MONGODB_DB_NAME: str = "crowdfund_admin"

    # Cache
    CACHE_TTL: int = 300  # seconds
    CACHE_MAX_KEYS: int = 1000

    # Unique code generation
    UNIQUE_CODE_MAX_ATTEMPTS: int = 100

    # Uploads
    UPLOAD_ROOT: str = "./uploads"
    FLAG_IMAGE_MAX_SIZE_MB: int = 2
    SLIDER_IMAGE_MAX_SIZE_MB: int = 5

    # Localization
    DEFAULT_LOCALE: str = "en"
    MESSAGE_BUNDLE_VERSION: str = "v1"

    @field_validator("DATABASE_TYPE", mode="before")
    @classmethod
    def normalize_database_type(cls, v: Any) -> str:
        """Lower-case the backend name and reject unknown values."""
        value = str(v or "").strip().lower()
        if value == "postgresql":
            value = "postgres"
        if value not in SUPPORTED_DATABASE_TYPES:
            raise ValueError(
                f"DATABASE_TYPE must be one of {', '.join(SUPPORTED_DATABASE_TYPES)}"
            )
        return value

    @field_validator("CACHE_TTL", "CACHE_MAX_KEYS", "UNIQUE_CODE_MAX_ATTEMPTS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def validate_backend_connection(self) -> "Settings":
        """The document backend cannot start without a connection URI."""
        if self.DATABASE_TYPE == "mongodb" and not self.MONGODB_URI:
            raise ValueError("MONGODB_URI is required when DATABASE_TYPE is mongodb")
        if self.DATABASE_TYPE == "postgres" and not self.DATABASE_URL:
            raise ValueError("DATABASE_URL is required when DATABASE_TYPE is postgres")
        return self

    @property
    def cache_config(self) -> Dict[str, Any]:
        return {"default_ttl": self.CACHE_TTL, "max_size": self.CACHE_MAX_KEYS}

    @property
    def flag_image_max_bytes(self) -> int:
        return self.FLAG_IMAGE_MAX_SIZE_MB * 1024 * 1024

    @property
    def slider_image_max_bytes(self) -> int:
        return self.SLIDER_IMAGE_MAX_SIZE_MB * 1024 * 1024


settings = Settings()
