"""Speck configuration.

This module provides the public API for Speck configuration management:
layered loading from defaults, user and project TOML files, and the
environment.

Example:
    >>> from speck.config import load_config
    >>> config = load_config()
    >>> config.logging.level
    <LogLevel.INFO: 'info'>
"""

from speck.exceptions import ConfigLoadError

from ._discovery import discover_sources, find_project_root, get_user_config_path
from ._load import create_config_logger, load_config
from ._loader import FEATURE_ENV_VAR, deep_merge, parse_env_vars, read_toml_file
from ._models import (
    Config,
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
)

__all__ = [
    "FEATURE_ENV_VAR",
    "Config",
    "ConfigLoadError",
    "ConfigSource",
    "ConfigSourceName",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "create_config_logger",
    "deep_merge",
    "discover_sources",
    "find_project_root",
    "get_user_config_path",
    "load_config",
    "parse_env_vars",
    "read_toml_file",
]
