"""Application settings loaded from the environment and .env via pydantic-settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


DEFAULT_API_URL = "https://doppler-simulator.duckdns.org"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DOPPLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_url: str = Field(default=DEFAULT_API_URL, description="Base URL of the simulation service")
    request_timeout_s: float = Field(default=30.0, gt=0)
    polling_interval_s: float = Field(default=2.0, gt=0)
    vehicle_type: str = Field(default="car", description="Vehicle used when a scenario names none")
    output_root: Path = Field(default=Path("outputs"))

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("output_root", mode="before")
    @classmethod
    def _expand_root(cls, value: Path) -> Path:
        return Path(value).expanduser().resolve()


_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
        logger.debug("Loaded settings: api_url=%s output_root=%s", _settings.api_url, _settings.output_root)
    return _settings


def output_root() -> Path:
    return get_settings().output_root


def reset_settings_cache() -> None:
    global _settings
    _settings = None
