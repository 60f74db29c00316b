# Settings — environment-driven configuration (CROSSBOX_* variables, .env).
# Created: 2026-10-05

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """CrossBox configuration.

    Every field can be set through the environment, e.g.
    ``CROSSBOX_GOOGLE_OAUTH_CLIENT_ID``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CROSSBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google OAuth client used to refresh Drive tokens
    google_oauth_client_id: str | None = None
    google_oauth_client_secret: str | None = None

    # Token store key for the Drive session
    drive_service: str = "google_drive"

    # HTTP timeouts (seconds)
    http_timeout: float = Field(default=15.0, gt=0)
    upload_timeout: float = Field(default=60.0, gt=0)

    # Drive listing page size (API max is 1000)
    page_size: int = Field(default=100, ge=1, le=1000)

    config_dir: Path = Field(default_factory=lambda: Path.home() / ".crossbox")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded once."""
    return Settings()


def get_config_dir() -> Path:
    """Get/create the configuration directory."""
    d = get_settings().config_dir.expanduser()
    d.mkdir(parents=True, exist_ok=True)
    return d
