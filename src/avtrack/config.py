"""Configuration management for AVTRACK."""

import logging
import os
import tomllib

from pathlib import Path
from typing import Any

import tomli_w

from pydantic import ValidationError

from avtrack.analysis.thresholds import (
    DEFAULT_THRESHOLDS,
    THRESHOLD_NAMES,
    DetectorThresholds,
)
from avtrack.constants import CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_FILE, DEFAULT_HOME_DIR

logger = logging.getLogger(__name__)

THRESHOLDS_SECTION = "thresholds"


def get_config_path() -> Path:
    """
    Get the path to the configuration file.

    Returns:
        Path from $AVTRACK_CONFIG if set, otherwise ~/.avtrack/config.toml
    """
    override = os.environ.get(CONFIG_PATH_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_HOME_DIR / DEFAULT_CONFIG_FILE


def load_config() -> dict[str, Any]:
    """
    Load configuration from TOML file.

    Returns:
        Configuration dictionary. Returns empty dict if file doesn't exist
        or is corrupted.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return {}

    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Treating config as empty. Fix or delete the file to resolve.")
        return {}


def save_config(config: dict[str, Any]) -> None:
    """
    Save configuration to TOML file using atomic write.

    Creates the parent directory if it doesn't exist.
    Uses temp file + rename for atomic operation.

    Args:
        config: Configuration dictionary to save

    Raises:
        PermissionError: If directory cannot be created or file cannot be written
    """
    config_path = get_config_path()

    config_dir = config_path.parent
    try:
        os.makedirs(config_dir, exist_ok=True)
    except PermissionError as e:
        raise PermissionError(
            f"Cannot create config directory {config_dir}: {e}"
        ) from e

    temp_path = config_path.with_suffix(".toml.tmp")

    try:
        with open(temp_path, "wb") as f:
            tomli_w.dump(config, f)

        os.replace(temp_path, config_path)

    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def load_thresholds() -> DetectorThresholds:
    """
    Build detector thresholds from defaults plus the ``[thresholds]`` table.

    Invalid overrides are logged and ignored so a bad config never blocks
    an analysis.

    Returns:
        DetectorThresholds instance
    """
    overrides = load_config().get(THRESHOLDS_SECTION, {})
    if not isinstance(overrides, dict) or not overrides:
        return DEFAULT_THRESHOLDS

    unknown = sorted(set(overrides) - set(THRESHOLD_NAMES))
    if unknown:
        logger.warning(f"Ignoring unknown threshold settings: {', '.join(unknown)}")

    known = {k: v for k, v in overrides.items() if k in THRESHOLD_NAMES}
    try:
        thresholds = DetectorThresholds(**known)
    except ValidationError as e:
        logger.warning(f"Invalid threshold overrides, using defaults: {e}")
        return DEFAULT_THRESHOLDS

    logger.debug(f"Loaded threshold overrides: {known}")
    return thresholds


def set_threshold(name: str, value: float) -> DetectorThresholds:
    """
    Persist a threshold override.

    Args:
        name: Threshold field name (see DetectorThresholds)
        value: New value

    Returns:
        Resulting thresholds

    Raises:
        ValueError: If name is unknown or value fails validation
    """
    if name not in THRESHOLD_NAMES:
        raise ValueError(
            f"Unknown threshold: {name}. Available: {', '.join(THRESHOLD_NAMES)}"
        )

    config = load_config()
    section = dict(config.get(THRESHOLDS_SECTION, {}))

    field_type = DetectorThresholds.model_fields[name].annotation
    if field_type is int:
        if value != int(value):
            raise ValueError(f"Threshold {name} must be a whole number, got {value}")
        section[name] = int(value)
    else:
        section[name] = float(value)

    try:
        thresholds = DetectorThresholds(
            **{k: v for k, v in section.items() if k in THRESHOLD_NAMES}
        )
    except ValidationError as e:
        raise ValueError(f"Invalid value for {name}: {e}") from e

    config[THRESHOLDS_SECTION] = section
    save_config(config)
    return thresholds


def reset_threshold(name: str) -> None:
    """
    Remove a threshold override, restoring its default.

    If this was the only override, removes the section.
    If config becomes empty, deletes the config file.

    Raises:
        ValueError: If name is unknown
    """
    if name not in THRESHOLD_NAMES:
        raise ValueError(
            f"Unknown threshold: {name}. Available: {', '.join(THRESHOLD_NAMES)}"
        )

    config = load_config()

    if THRESHOLDS_SECTION in config and name in config[THRESHOLDS_SECTION]:
        del config[THRESHOLDS_SECTION][name]

        if not config[THRESHOLDS_SECTION]:
            del config[THRESHOLDS_SECTION]

        if not config:
            config_path = get_config_path()
            if config_path.exists():
                config_path.unlink()
        else:
            save_config(config)
