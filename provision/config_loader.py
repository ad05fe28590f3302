# provision/config_loader.py
# -*- coding: utf-8 -*-
"""
Configuration loader for the installer.

Builds InstallerSettings with this order of precedence:
1. Pydantic model defaults
2. Environment variables (APT_OPTIONS, ADDITIONAL_PACKAGES, DEPLOYMENT_TYPE,
   PUPPET_CLASSES, VIRTUALENV_NEEDED, ZULIP_PATH, ...)
3. An optional YAML file
and then combines the result with the validated command-line options into
the immutable InstallConfig.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from provision.config_models import (
    InstallConfig,
    InstallerSettings,
    InstallOptions,
)
from provision.errors import ConfigurationError

module_logger = logging.getLogger(__name__)

CONFIG_FILE_DEFAULT = "config.yaml"
CONFIG_FILE_ENV_VAR = "ZULIP_INSTALL_CONFIG"


def _deep_update(
    source: Dict[str, Any], overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Recursively updates `source` with values from `overrides`. Nested
    dictionaries are merged; None values in `overrides` are ignored.
    """
    for key, value in overrides.items():
        if (
            isinstance(value, dict)
            and key in source
            and isinstance(source[key], dict)
        ):
            source[key] = _deep_update(source[key], value)
        elif value is not None:
            source[key] = value
    return source


def resolve_config_path(
    config_file_path: Optional[Union[str, Path]] = None,
) -> Path:
    if config_file_path:
        return Path(config_file_path)
    from_env = os.environ.get(CONFIG_FILE_ENV_VAR)
    if from_env:
        return Path(from_env)
    return Path.cwd() / CONFIG_FILE_DEFAULT


def _load_yaml_overrides(
    yaml_config_path: Path, logger_to_use: logging.Logger
) -> Dict[str, Any]:
    if not (yaml_config_path.exists() and yaml_config_path.is_file()):
        logger_to_use.debug(
            f"Configuration file '{yaml_config_path}' not found. Using defaults and environment variables."
        )
        return {}
    try:
        with open(yaml_config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger_to_use.warning(
            f"Could not parse YAML config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}
    except OSError as e:
        logger_to_use.warning(
            f"Could not read config file '{yaml_config_path}': {e}. Using defaults and environment variables."
        )
        return {}

    if yaml_data is None:
        return {}
    if not isinstance(yaml_data, dict):
        logger_to_use.warning(
            f"Config file '{yaml_config_path}' does not contain a valid YAML dictionary. Ignoring."
        )
        return {}
    logger_to_use.info(f"Loaded installer configuration from {yaml_config_path}")
    return yaml_data


def load_installer_settings(
    config_file_path: Optional[Union[str, Path]] = None,
    current_logger: Optional[logging.Logger] = None,
) -> InstallerSettings:
    """
    Loads installer settings from defaults, the environment and an optional
    YAML file (highest precedence of the three).

    Args:
        config_file_path: Explicit YAML path; falls back to $ZULIP_INSTALL_CONFIG
            and then ./config.yaml.
        current_logger: Optional logger to use instead of the module logger.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """
    logger_to_use = current_logger if current_logger else module_logger

    try:
        settings_after_env_and_defaults = InstallerSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid installer environment: {e}") from e

    yaml_overrides = _load_yaml_overrides(
        resolve_config_path(config_file_path), logger_to_use
    )
    if not yaml_overrides:
        return settings_after_env_and_defaults

    current_values_dict = settings_after_env_and_defaults.model_dump()
    current_values_dict = _deep_update(current_values_dict, yaml_overrides)
    try:
        return InstallerSettings(**current_values_dict)
    except ValidationError as e:
        logger_to_use.error(f"Configuration validation failed: {e}")
        raise ConfigurationError(f"Configuration error: {e}") from e


def build_install_config(
    options: InstallOptions, settings: InstallerSettings
) -> InstallConfig:
    """Combines validated options and loaded settings into the run's config."""
    return InstallConfig(options=options, settings=settings)
