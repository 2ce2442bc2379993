"""Application configuration module.

This module contains settings for the URL shortener application,
loaded from environment variables with appropriate defaults.
"""

from __future__ import annotations

import string
from enum import Enum
from typing import List, Optional, Union

from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment setting
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # App Information
    APP_NAME: str = "URL Shortener"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "A clean architecture URL shortening service"

    # API Configuration
    API_PREFIX: str = "/api"
    REDIRECT_PREFIX: str = "/r"
    DEBUG: bool = False

    # CORS settings
    CORS_ORIGINS: Union[List[str], str] = ["*"]  # Allow all origins by default

    # Short code generation
    URL_CODE_LENGTH: int = 7
    URL_CODE_CHARS: str = string.ascii_lowercase + string.ascii_uppercase + string.digits
    URL_CODE_MAX_ATTEMPTS: int = 10  # Existence checks before giving up

    # Database override (e.g. "sqlite+aiosqlite:///./shortener.db")
    DATABASE_URL: Optional[str] = None

    # PostgreSQL settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "url_shortener"

    # PostgreSQL pool settings
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False
    DB_CREATE_TABLES: bool = True  # Create missing tables on startup

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}"
    LOG_JSON: bool = True
    REQUEST_LOGGING_ENABLED: bool = True  # Enable request logging middleware

    # OpenTelemetry configuration
    OTEL_ENABLED: bool = False  # Enable/disable OpenTelemetry instrumentation
    OTEL_SERVICE_NAME: str = "url-shortener"
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "http://localhost:4317"
    OTEL_EXPORTER_OTLP_PROTOCOL: str = "grpc"  # grpc or http/protobuf
    OTEL_TRACES_SAMPLER_ARG: float = 1.0  # Sample 100% of traces by default
    OTEL_METRICS_EXPORT_INTERVAL_MILLIS: int = 60000

    # Validators
    @field_validator("CORS_ORIGINS")
    def validate_list_or_string(cls, v: Union[List[str], str]) -> List[str]:
        """Convert comma-separated string to list if needed."""
        if isinstance(v, str):
            if not v.strip():
                return []
            if v == "*":
                return ["*"]
            return [item.strip() for item in v.split(",")]
        return v

    @field_validator("URL_CODE_LENGTH", "URL_CODE_MAX_ATTEMPTS")
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("URL_CODE_CHARS")
    def validate_code_chars(cls, v: str) -> str:
        if not v:
            raise ValueError("alphabet must not be empty")
        if len(set(v)) != len(v):
            raise ValueError("alphabet must not contain repeated characters")
        return v

    @field_validator("DATABASE_URL", mode="before")
    def empty_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty override as unset."""
        if v == "":
            return None
        return v

    # Computed fields
    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the SQLAlchemy database URI from settings or use override."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"


# Create a singleton instance of the settings
settings = Settings()
