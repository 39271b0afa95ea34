"""Centralized configuration for termsnap using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `TERMSNAP_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    store_dir : Path
        Root directory of the JSON snapshot store; maps from `TERMSNAP_STORE_DIR`.
    recess_min_gap_days : int
        Gaps between periods must exceed this many days to count as a recess.
    recent_window_days : int
        Periods that concluded within this many days may be snapshotted from
        live attributes without being marked as reconstructed.
    calendar_file / entities_file : Path | None
        JSON data sources used by the HTTP API and the CLI defaults.
    """

    environment: EnvName = Field(default="dev", alias="TERMSNAP_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    store_dir: Path = Field(default=Path("artifacts") / "snapshots", alias="TERMSNAP_STORE_DIR")
    recess_min_gap_days: int = Field(default=1, ge=0, alias="TERMSNAP_RECESS_MIN_GAP_DAYS")
    recent_window_days: int = Field(default=7, ge=0, alias="TERMSNAP_RECENT_WINDOW_DAYS")
    calendar_file: Path | None = Field(default=None, alias="TERMSNAP_CALENDAR_FILE")
    entities_file: Path | None = Field(default=None, alias="TERMSNAP_ENTITIES_FILE")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def is_prod(self) -> bool:
        """Return True if running in the production environment."""
        return self.environment == "prod"

    @property
    def recess_min_gap(self) -> timedelta:
        return timedelta(days=self.recess_min_gap_days)

    @property
    def recent_window(self) -> timedelta:
        return timedelta(days=self.recent_window_days)

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    os.environ.setdefault("TERMSNAP_ENV", "dev")
    return Settings()


settings: Settings = load_settings()


def get_logger(name: str = "termsnap") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
