# pyright: reportAny=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""TOML configuration file loading and merging."""

from __future__ import annotations

import os
import tomllib
from typing import TYPE_CHECKING, Any

from speck.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from pathlib import Path

#: Branch override consumed by non-git callers and tests.
FEATURE_ENV_VAR = "SPECIFY_FEATURE"

_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "SPECK_LOG_LEVEL": ("logging", "level"),
    "SPECK_LOG_FORMAT": ("logging", "format"),
    "SPECK_LOG_FILE": ("logging", "file"),
    FEATURE_ENV_VAR: ("feature_override",),
}


def read_toml_file(path: Path) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Read and parse a TOML file.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed TOML content as dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigLoadError: If the file cannot be parsed.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Failed to parse TOML file: {e}"
        raise ConfigLoadError(
            msg,
            path=path,
            line=getattr(e, "lineno", None),
            column=getattr(e, "colno", None),
        ) from e


def deep_merge(
    base: dict[str, Any],  # pyright: ignore[reportExplicitAny]
    override: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Deep merge two configuration dictionaries.

    Merges `override` into `base`, returning a new dictionary. Neither input
    is modified. Dictionaries merge recursively; everything else is replaced.

    Args:
        base: Base configuration (lower precedence).
        override: Override configuration (higher precedence).

    Returns:
        Merged configuration dictionary.
    """
    result: dict[str, Any] = dict(base)  # pyright: ignore[reportExplicitAny]
    for key, value in override.items():
        existing = result.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            result[key] = deep_merge(existing, value)
        else:
            result[key] = value
    return result


def parse_env_vars() -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Collect Speck settings from environment variables.

    Returns:
        Nested configuration dictionary containing only the variables that
        are set.
    """
    result: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    for env_key, path in _ENV_KEYS.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        target = result
        for part in path[:-1]:
            target = target.setdefault(part, {})
        target[path[-1]] = value
    return result
