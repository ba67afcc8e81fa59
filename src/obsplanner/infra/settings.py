"""
Application settings for obsplanner.

This module defines all configuration settings for obsplanner using Pydantic BaseSettings.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # Database settings
    database_url: str = Field(default="sqlite:///./obsplanner.db", alias="DATABASE_URL")
    echo_sql: bool = Field(default=False, alias="ECHO_SQL")
    pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    max_overflow: int = Field(default=10, alias="DB_MAX_OVERFLOW")
    pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")
    connect_timeout: int = Field(default=30, alias="DB_CONNECT_TIMEOUT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")  # Comma-separated origins
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    # Timeline presentation
    primary_timezone: str = Field(default="Europe/Rome", alias="PRIMARY_TIMEZONE")
    secondary_timezone: str = Field(default="America/New_York", alias="SECONDARY_TIMEZONE")
    timeline_start_hour: int = Field(default=2, ge=0, le=23, alias="TIMELINE_START_HOUR")
    timeline_default_zoom: int = Field(default=24, alias="TIMELINE_DEFAULT_ZOOM")
    pinned_lane: str = Field(default="On Air", alias="PINNED_LANE")
    unassigned_lane: str = Field(default="No Encoder", alias="UNASSIGNED_LANE")

    # OBS feed storage
    events_path: str = Field(default="./data/events.json", alias="EVENTS_PATH")
    data_dir: str = Field(default="./data", alias="DATA_DIR")

    http_host: str = Field(default="127.0.0.1", alias="HTTP_HOST")
    http_port: int = Field(default=3001, alias="HTTP_PORT")

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields like PYTHONPATH from .env
    )

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("OBSPLANNER_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


# Global settings instance (load from best-effort .env discovery)
_env_file = _resolve_env_file()
settings = Settings(_env_file=_env_file) if _env_file else Settings()  # type: ignore[call-arg]
