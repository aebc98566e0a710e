"""Configuration management for Crewboard.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once at
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
        env_prefix="CREWBOARD_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"

    # Record Store Settings
    store_url: str = Field(
        default="http://localhost:8080/exec",
        description="Web app URL of the remote record store",
    )
    request_timeout_seconds: float = Field(default=15.0, gt=0)

    # Refresh Settings
    refresh_interval_ms: int = Field(default=30000, ge=1000)
    refresh_on_start: bool = True
    refresh_after_mutation: bool = True

    # Dashboard Settings
    dashboard_limit: int = Field(default=5, ge=1)

    # Archive Settings
    archive_prefix: str = "Archive_"
    archive_mode: Literal["client", "server"] = Field(
        default="client",
        description=(
            "client: copy into the archive collection, then delete the original. "
            "server: a single delete call, the store moves the row itself."
        ),
    )

    # Chat Settings
    chat_collection: str = "Chatboard"
    default_chat_author: str = "User"

    # Session Settings
    users_collection: str = "Users"
    require_login: bool = False
    role_visibility: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Role name to visible collection names. Roles not listed see everything.",
    )

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    @field_validator("store_url")
    @classmethod
    def validate_store_url(cls, v: str) -> str:
        """Validate the store URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("store_url must start with http:// or https://")
        return v

    @field_validator("archive_prefix")
    @classmethod
    def validate_archive_prefix(cls, v: str) -> str:
        """An empty prefix would point archives at the live collections."""
        if not v:
            raise ValueError("archive_prefix must not be empty")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and reused for the lifetime of the process.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
