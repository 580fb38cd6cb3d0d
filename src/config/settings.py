# src/config/settings.py - v3
"""Typed configuration loaded from .env via pydantic-settings.

Groups storage and event-bus backends, write-path limits, pruning, cache
and logging options.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docwrite.core.constants import MAX_UTC_OFFSET, MIN_TIMESTAMP, MIN_UTC_OFFSET


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Storage ===
    storage_backend: Literal["memory", "mongo"] = "memory"
    mongo_url: str = ""
    mongo_database: str = "docwrite"

    # === Event bus ===
    event_bus_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = ""
    redis_channel_prefix: str = "docwrite:"

    # === Write path ===
    replace_upsert: bool = False
    created_at_fallback: bool = False
    min_timestamp: int = MIN_TIMESTAMP
    min_utc_offset: int = MIN_UTC_OFFSET
    max_utc_offset: int = MAX_UTC_OFFSET

    # === Pruning ===
    autoprune_days: int | None = None

    # === Cache ===
    cache_enabled: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("autoprune_days")
    @classmethod
    def validate_autoprune_days(cls, v: int | None) -> int | None:  # noqa: N805
        """AUTOPRUNE_DAYS must be positive when set."""
        if v is not None and v <= 0:
            raise ValueError("autoprune_days must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.min_utc_offset > self.max_utc_offset:
            errors.append("MIN_UTC_OFFSET must be <= MAX_UTC_OFFSET")

        if self.min_timestamp < 0:
            errors.append("MIN_TIMESTAMP must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or tooling).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
