"""Configuration management for apnea-cluster."""

import logging
import os
import tomllib

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomli_w

from apnea_cluster.analysis.config import DEFAULT_PRESET, ClusteringConfig, get_preset
from apnea_cluster.constants import APP_HOME, DEFAULT_CONFIG_FILE

logger = logging.getLogger(__name__)

CLUSTERING_SECTION = "clustering"
PRESET_KEY = "preset"


def get_config_path() -> Path:
    """
    Get the path to the configuration file.

    Returns:
        Path to ~/.apnea_cluster/config.toml
    """
    return APP_HOME / DEFAULT_CONFIG_FILE


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


def get_clustering_settings() -> dict[str, Any]:
    """
    Get the [clustering] table from config.

    Returns:
        Settings dictionary (preset name and field overrides), possibly empty
    """
    settings = load_config().get(CLUSTERING_SECTION, {})
    if not isinstance(settings, dict):
        logger.warning(f"Ignoring non-table [{CLUSTERING_SECTION}] config entry")
        return {}
    return settings


def resolve_clustering_config(
    preset: str | None = None,
    overrides: Mapping[str, Any] | None = None,
    settings: Mapping[str, Any] | None = None,
) -> ClusteringConfig:
    """
    Build the effective clustering configuration.

    Precedence: explicit overrides > config file values > preset > defaults.
    The preset comes from the argument, else the config file, else the
    default preset.

    Args:
        preset: Preset name chosen by the caller
        overrides: Field overrides chosen by the caller (None values ignored)
        settings: [clustering] table to use instead of reading the config file

    Returns:
        Validated ClusteringConfig

    Raises:
        ValueError: If the preset is unknown or the merged values are invalid
    """
    file_settings = dict(get_clustering_settings() if settings is None else settings)
    file_preset = file_settings.pop(PRESET_KEY, None)

    base = get_preset(preset or file_preset or DEFAULT_PRESET)

    values = base.model_dump()
    values.update(file_settings)
    if overrides:
        values.update(
            {key: value for key, value in overrides.items() if value is not None}
        )

    return ClusteringConfig(**values)


def set_clustering_setting(key: str, value: Any) -> Any:
    """
    Set a value in the [clustering] table.

    The value is validated against the full resulting configuration before
    it is written.

    Args:
        key: "preset" or a ClusteringConfig field name
        value: New value (strings are coerced by validation)

    Returns:
        The stored (coerced) value

    Raises:
        ValueError: If the key is unknown or the value is invalid
    """
    if key != PRESET_KEY and key not in ClusteringConfig.model_fields:
        raise ValueError(
            f"Unknown setting: {key}. "
            f"Available: {[PRESET_KEY, *ClusteringConfig.model_fields]}"
        )

    config = load_config()
    settings = dict(config.get(CLUSTERING_SECTION, {}))
    settings[key] = value

    resolved = resolve_clustering_config(settings=settings)
    stored = value if key == PRESET_KEY else getattr(resolved, key)

    settings[key] = stored
    config[CLUSTERING_SECTION] = settings
    save_config(config)
    return stored


def unset_clustering_setting(key: str) -> bool:
    """
    Remove a value from the [clustering] table.

    If the table becomes empty it is removed; if the config becomes empty
    the file is deleted.

    Returns:
        True if the key was present
    """
    config = load_config()
    settings = config.get(CLUSTERING_SECTION, {})
    if key not in settings:
        return False

    del settings[key]
    if not settings:
        del config[CLUSTERING_SECTION]

    if not config:
        config_path = get_config_path()
        if config_path.exists():
            config_path.unlink()
    else:
        save_config(config)
    return True
