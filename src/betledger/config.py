"""Environment-driven configuration helpers for betledger."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SUPPORTED_SPORTS = ["NFL", "NBA", "NCAAF", "NCAAB", "MLB", "NHL", "WNBA"]


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./betledger.db")

    results_api_key: str = Field(default="", validation_alias="RESULTS_API_KEY")
    results_base_url: str = Field(default="https://api.scoreroom.example/v1")
    results_timeout_seconds: float = Field(default=10.0, gt=0.0)
    results_rate_limit_per_minute: int = Field(default=30, ge=0)
    results_max_attempts: int = Field(default=3, ge=1, le=10)
    results_supported_sports: list[str] = Field(default_factory=lambda: list(DEFAULT_SUPPORTED_SPORTS))

    settlement_lease_seconds: int = Field(default=120, ge=1)
    settlement_interval_minutes: int = Field(default=5, ge=1)

    parse_max_workers: int = Field(default=1, ge=1, le=32)
    sport_lookup_path: Path | None = Field(default=None)

    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_results_api_key() -> str:
    """Return the results provider API key or raise a helpful error."""

    key = os.getenv("RESULTS_API_KEY") or get_settings().results_api_key
    if not key:
        raise RuntimeError(
            "RESULTS_API_KEY is not configured. "
            "Set it in .env for local dev or in the deployment environment."
        )
    return key
