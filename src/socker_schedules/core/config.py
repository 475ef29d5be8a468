from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SOCKER_",
        extra="ignore",
    )

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./socker_schedules.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    # cache
    cache_namespace: str = "socker-schedules"
    stale_after_hours: float = 12.0

    # sources
    sources_file: Path | None = None

    # upstream http
    http_timeout_s: float = 30.0
    http_connect_timeout_s: float = 10.0
    http_max_attempts: int = Field(default=1, ge=1)
    http_backoff_s: float = 1.0

    log_level: str = "INFO"


settings = Settings()
