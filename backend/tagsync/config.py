from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    domain: str = "localhost"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    data_dir: Path = Path("/app/data")
    db_url: str = "sqlite:////app/data/tagsync.db"
    sqlite_busy_timeout_ms: int = 5000

    # Identity is authenticated upstream; the gateway forwards it in this header
    user_id_header: str = "X-User-Id"

    log_level: str = "INFO"

    @field_validator("sqlite_busy_timeout_ms")
    @classmethod
    def _check_busy_timeout(cls, value: int) -> int:
        if value < 0:
            raise ValueError("SQLITE_BUSY_TIMEOUT_MS must be >= 0")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown LOG_LEVEL: {value!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
