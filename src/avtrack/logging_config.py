"""Centralized logging configuration for AVTRACK."""

import logging
import logging.config
import os
import sys

from pathlib import Path
from typing import Any

from avtrack.constants import (
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_FILE,
    DEFAULT_LOG_MAX_BYTES,
)

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty third-party loggers pinned to WARNING unless overridden in config
QUIET_LOGGERS = ("mcp", "httpx", "anyio")

_logging_configured = False


def _get_user_logging_config() -> dict[str, Any]:
    """
    Load the ``[logging]`` table from the config file.

    Returns:
        Dictionary with logging settings, or empty dict if not configured
    """
    try:
        from avtrack.config import load_config

        logging_config = load_config().get("logging", {})
        if isinstance(logging_config, dict):
            return logging_config
        return {}
    except Exception:
        return {}


def get_log_dir(user_config: dict[str, Any] | None = None) -> Path:
    """
    Get log directory path, creating if needed.

    Args:
        user_config: ``[logging]`` settings; ``dir`` overrides the default

    Returns:
        Path to log directory
    """
    configured = (user_config or {}).get("dir")
    log_dir = Path(configured).expanduser() if configured else DEFAULT_LOG_DIR
    os.makedirs(log_dir, mode=0o700, exist_ok=True)
    return log_dir


def get_log_path(user_config: dict[str, Any] | None = None) -> Path:
    """Path to the active avtrack.log file."""
    return get_log_dir(user_config) / DEFAULT_LOG_FILE


def _file_handler(user_config: dict[str, Any]) -> dict[str, Any]:
    max_size_mb = user_config.get("max_size_mb")
    max_bytes = (
        int(max_size_mb * 1024 * 1024) if max_size_mb else DEFAULT_LOG_MAX_BYTES
    )
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": str(user_config.get("level", "DEBUG")).upper(),
        "formatter": "file",
        "filename": str(get_log_path(user_config)),
        "maxBytes": max_bytes,
        "backupCount": user_config.get("backup_count", DEFAULT_LOG_BACKUP_COUNT),
        "encoding": "utf-8",
    }


def _build_logging_config(
    verbose: bool = False,
    console_format: str | None = None,
) -> dict[str, Any]:
    """
    Build the dictConfig configuration dictionary.

    Args:
        verbose: If True, set console to DEBUG level
        console_format: Override console format string

    Returns:
        Dictionary suitable for logging.config.dictConfig()
    """
    user_config = _get_user_logging_config()

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": console_format or FILE_FORMAT},
            "file": {"format": FILE_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG" if verbose else "INFO",
                "formatter": "console",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            name: {"level": user_config.get("third_party_level", "WARNING")}
            for name in QUIET_LOGGERS
        },
        "root": {
            "level": "DEBUG",
            "handlers": ["console"],
        },
    }

    if user_config.get("enabled", True):
        config["handlers"]["file"] = _file_handler(user_config)
        config["root"]["handlers"].append("file")

    return config


def setup_logging(
    *,
    verbose: bool = False,
    console_format: str | None = None,
) -> None:
    """
    Configure logging for the AVTRACK CLI and server.

    Library use never calls this; callers embedding the engine keep their own
    logging setup. Subsequent calls are no-ops.

    Args:
        verbose: If True, set console to DEBUG level
        console_format: Override console format string. If None, uses full format.
    """
    global _logging_configured

    if _logging_configured:
        return

    try:
        logging.config.dictConfig(
            _build_logging_config(verbose=verbose, console_format=console_format)
        )
    except Exception as e:
        sys.stderr.write(f"WARNING: Failed to configure logging: {e}\n")
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format=console_format or "%(levelname)s: %(message)s",
        )

    _logging_configured = True


def reset_logging() -> None:
    """Allow setup_logging to run again (used by tests)."""
    global _logging_configured
    _logging_configured = False
