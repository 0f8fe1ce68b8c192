"""
ATIA Dashboard Configuration Module

Centralized configuration management using pydantic-settings.
Loads settings from environment variables and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Find the project root (where .env is located)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

ExecutionContext = Literal["client", "server"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Aggregation Service Endpoints
    # ==========================================================================
    public_api_base_url: str = Field(
        default="http://localhost:8080",
        description="Service URL used from the interactive client context",
    )
    server_api_base_url: str = Field(
        default="http://backend:8080",
        description="Service URL used from the server-side render context",
    )
    execution_context: ExecutionContext = Field(
        default="client",
        description="Which context this process runs in",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout for the aggregation service (seconds)",
    )

    # ==========================================================================
    # Polling Configuration
    # ==========================================================================
    health_poll_seconds: float = Field(
        default=30.0,
        description="Health check polling interval (seconds)",
    )
    threats_poll_seconds: float = Field(
        default=60.0,
        description="Recent threats polling interval (seconds)",
    )
    threats_limit: int = Field(
        default=50,
        description="Number of recent threats fetched per poll",
    )

    # ==========================================================================
    # Local Settings Persistence
    # ==========================================================================
    settings_file: Path = Field(
        default=Path.home() / ".atia" / "settings.json",
        description="Key-value file holding the dashboard settings record",
    )
    settings_key: str = Field(
        default="atia_settings",
        description="Key the settings record is stored under",
    )

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    @field_validator("settings_file", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Ensure settings_file is a Path object."""
        return Path(v).expanduser() if isinstance(v, str) else v

    @field_validator("public_api_base_url", "server_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop trailing slashes so paths join cleanly."""
        return v.rstrip("/")

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    def resolve_base_url(self, context: ExecutionContext | None = None) -> str:
        """
        Pick the service URL for an execution context.

        The client context and the server-render context reach the service
        through different hosts, so each has its own default.
        """
        context = context or self.execution_context
        if context == "server":
            return self.server_api_base_url
        return self.public_api_base_url

    @property
    def api_base_url(self) -> str:
        """Service URL for the configured execution context."""
        return self.resolve_base_url()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience alias
settings = get_settings()
