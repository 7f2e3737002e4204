"""Configuration management for DocGate.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCGATE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "DocGate"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Adapter selection (resolved once at startup)
    data_service: str = "sql"
    logging_service: str = "structlog"
    auth_service: str = "jwt"

    # Collections exposed by the HTTP app (module must define COLLECTIONS)
    collections_module: str | None = None

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./dg_data/docgate.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_echo: bool = False

    # Query Settings
    default_query_limit: int = Field(default=50, gt=0)

    # Security Settings
    secret_key: str = Field(
        default="change-me-in-production-use-openssl-rand-hex-32",
        description="Secret key for JWT token signing",
    )
    jwt_issuer: str = "docgate"
    access_token_expire_minutes: int = 60

    # CORS Settings
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("data_service", "logging_service", "auth_service")
    @classmethod
    def normalize_adapter_name(cls, v: str) -> str:
        """Adapter names are matched case-insensitively."""
        return v.strip().lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
