"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a cached `AppConfig` loader that reads from:
- Real environment variables (highest precedence)
- `.env` files in the working directory: .env, .env.local

It also provides `get_logger()`, the single place where VocabCards loggers are
wired to a handler and a level.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _default_data_dir() -> Path:
    return Path.home() / ".vocabcards"


class AppConfig(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `VOCABCARDS_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    data_dir : Path
        Directory holding the JSON records; maps from `VOCABCARDS_DATA_DIR`.
    """

    environment: EnvName = Field(default="dev", alias="VOCABCARDS_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    data_dir: Path = Field(default_factory=_default_data_dir, alias="VOCABCARDS_DATA_DIR")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    """Create and cache an `AppConfig` instance.

    Tests force a rebuild via `load_config.cache_clear()` after mutating
    `os.environ`.
    """
    return AppConfig()


def get_logger(name: str = "vocabcards") -> logging.Logger:
    """Return a process-global logger configured to the configured log level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_config().log_level_numeric())
    logger.propagate = False
    return logger


__all__ = ["AppConfig", "load_config", "get_logger"]
