"""Configuration settings for jobparam.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_RESULTS = 5
DEFAULT_FALLBACK_VALUE = "0.0.1-1+999"


def _default_db_url() -> str:
    """Return the default database URL (SQLite)."""
    db_path = Path.home() / ".local" / "share" / "jobparam" / "db.sqlite"
    return f"sqlite:///{db_path}"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the JOBPARAM_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="JOBPARAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    db_url: str = Field(
        default_factory=_default_db_url,
        description="Database connection URL for the job directory",
    )

    # Operational
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Parameter defaults
    default_max_results: int = Field(
        default=DEFAULT_MAX_RESULTS,
        ge=1,
        description="Build names offered when a parameter sets no bound",
    )
    fallback_value: str = Field(
        default=DEFAULT_FALLBACK_VALUE,
        min_length=1,
        description="Choice offered when no qualifying build exists",
    )

    # Visibility
    default_principal: str | None = Field(
        default=None,
        description="Principal used when a request names none "
        "(unset means the unrestricted system context)",
    )


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = [
    "DEFAULT_FALLBACK_VALUE",
    "DEFAULT_MAX_RESULTS",
    "Settings",
    "get_settings",
    "print_settings_json",
]
