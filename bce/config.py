# bce/config.py
"""Application configuration using pydantic-settings.

Provides a centralized Settings class for all environment variables.
Every variable is prefixed with BCE_, e.g. BCE_DATABASE=/tmp/completion.db.
"""

import logging
import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file and environment variables.
    Environment variables take precedence over .env file values.
    """

    # Grammar store
    database: str = "~/.bce/completion.db"

    # Logging (stderr only; stdout is the completion channel)
    log_level: str = "WARNING"
    log_json: bool = False

    # Shell completion context
    line_var: str = "COMP_LINE"
    point_var: str = "COMP_POINT"

    # Grammar file download
    download_timeout: float = 30.0  # Seconds per attempt

    model_config = SettingsConfigDict(
        env_prefix="BCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
        case_sensitive=False,  # Allow case-insensitive env var names
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def database_path(self) -> str:
        """Database path with ~ and environment variables expanded."""
        return os.path.expandvars(os.path.expanduser(self.database))

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for logging.setLevel()."""
        return logging.getLevelNamesMapping()[self.log_level]


# Singleton instance - import this in your code
settings = Settings()
