"""Project root and config path discovery utilities.

This module locates the Speck project root by searching upward for the
`.speck/` marker directory, and determines the platform-specific user
configuration path.
"""

from pathlib import Path

import platformdirs

from speck.config._loader import parse_env_vars
from speck.config._models import ConfigSource, ConfigSourceName

SPECK_DIR_NAME = ".speck"
CONFIG_FILE_NAME = "config.toml"


def find_project_root(start: Path | None = None) -> Path | None:
    """Find the project root by searching upward for a .speck/ directory.

    Args:
        start: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        The directory containing `.speck/`, or None if none is found.
    """
    current = (start or Path.cwd()).resolve()

    while True:
        if (current / SPECK_DIR_NAME).is_dir():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def get_user_config_path() -> Path:
    r"""Get platform-specific user config file path.

    - Linux: ``~/.config/speck/config.toml``
    - macOS: ``~/Library/Application Support/speck/config.toml``
    - Windows: ``%APPDATA%\speck\config.toml``

    Returns:
        Path to the user config file (may not exist).
    """
    return platformdirs.user_config_path("speck") / CONFIG_FILE_NAME


def _file_exists(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def discover_sources(project_root: Path | None = None) -> list[ConfigSource]:
    """Discover configuration sources in precedence order (highest first).

    File values are left empty; they are read during loading.

    Args:
        project_root: Project root directory. If None, auto-detect by
            searching upward for `.speck/`.

    Returns:
        List of ConfigSource objects, highest precedence first.
    """
    resolved_root = project_root if project_root else find_project_root()
    env_values = parse_env_vars()

    sources: list[ConfigSource] = [
        ConfigSource(
            name=ConfigSourceName.ENV,
            path=None,
            exists=bool(env_values),
            values=env_values,
        )
    ]

    if resolved_root:
        project_path = resolved_root / SPECK_DIR_NAME / CONFIG_FILE_NAME
        sources.append(
            ConfigSource(
                name=ConfigSourceName.PROJECT,
                path=project_path,
                exists=_file_exists(project_path),
                values={},
            )
        )

    user_path = get_user_config_path()
    sources.append(
        ConfigSource(
            name=ConfigSourceName.USER,
            path=user_path,
            exists=_file_exists(user_path),
            values={},
        )
    )

    sources.append(
        ConfigSource(
            name=ConfigSourceName.DEFAULT,
            path=None,
            exists=True,
            values={},
        )
    )
    return sources
