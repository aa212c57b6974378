"""
Logging setup for the apnea-cluster CLI.

Console output goes to stderr. A rotating log file under
~/.apnea_cluster/logs is controlled by the [logging] table of the config
file:

    [logging]
    enabled = true
    level = "DEBUG"
    max_size_mb = 10
    backup_count = 5
"""

import logging
import logging.config
import os
import sys

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apnea_cluster.constants import (
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_FILE,
    DEFAULT_LOG_MAX_BYTES,
)

LOGGING_SECTION = "logging"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_logging_configured = False


class LoggingSettings(BaseModel):
    """Validated contents of the [logging] config table."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Write the rotating log file")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG", description="Log file level"
    )
    max_size_mb: float = Field(
        default=DEFAULT_LOG_MAX_BYTES / (1024 * 1024),
        gt=0,
        description="Size at which the log file rotates",
    )
    backup_count: int = Field(
        default=DEFAULT_LOG_BACKUP_COUNT, ge=0, description="Rotated files to keep"
    )

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @property
    def max_bytes(self) -> int:
        return int(self.max_size_mb * 1024 * 1024)


def get_log_path() -> Path:
    """
    Get path to the active log file, creating the log directory if needed.

    Returns:
        Path to apnea_cluster.log
    """
    os.makedirs(DEFAULT_LOG_DIR, mode=0o700, exist_ok=True)
    return DEFAULT_LOG_DIR / DEFAULT_LOG_FILE


def load_logging_settings() -> LoggingSettings:
    """
    Read the [logging] table from the config file.

    Logging is not configured yet when this runs, so problems are reported
    on stderr and the defaults are used.
    """
    from apnea_cluster.config import load_config

    table = load_config().get(LOGGING_SECTION, {})
    if not isinstance(table, dict):
        sys.stderr.write(f"WARNING: Ignoring non-table [{LOGGING_SECTION}] config\n")
        return LoggingSettings()

    try:
        return LoggingSettings(**table)
    except ValidationError as e:
        sys.stderr.write(
            f"WARNING: Invalid [{LOGGING_SECTION}] config, using defaults: "
            f"{e.error_count()} error(s)\n"
        )
        return LoggingSettings()


def build_logging_config(
    settings: LoggingSettings,
    *,
    verbose: bool = False,
    console_format: str | None = None,
) -> dict[str, Any]:
    """
    Build the dictConfig dictionary.

    Args:
        settings: File logging settings
        verbose: If True, set console to DEBUG level
        console_format: Console format string (defaults to the file format)

    Returns:
        Dictionary suitable for logging.config.dictConfig()
    """
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG" if verbose else "INFO",
            "formatter": "console",
            "stream": "ext://sys.stderr",
        },
    }
    if settings.enabled:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.level,
            "formatter": "file",
            "filename": str(get_log_path()),
            "maxBytes": settings.max_bytes,
            "backupCount": settings.backup_count,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": console_format or FILE_FORMAT},
            "file": {"format": FILE_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": "DEBUG", "handlers": list(handlers)},
    }


def setup_logging(
    *,
    verbose: bool = False,
    console_format: str | None = None,
) -> None:
    """
    Configure logging for the apnea-cluster application.

    Safe to call more than once; only the first call takes effect.

    Args:
        verbose: If True, set console to DEBUG level
        console_format: Override console format string
    """
    global _logging_configured

    if _logging_configured:
        return

    try:
        config = build_logging_config(
            load_logging_settings(), verbose=verbose, console_format=console_format
        )
        logging.config.dictConfig(config)
    except (OSError, ValueError) as e:
        sys.stderr.write(f"WARNING: Failed to configure logging: {e}\n")
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format=console_format or "%(levelname)s: %(message)s",
        )

    _logging_configured = True
