# pyright: reportAny=false
"""Layered configuration loading."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from speck.config._discovery import discover_sources
from speck.config._loader import deep_merge, read_toml_file
from speck.config._models import Config
from speck.utils._logging import create_logger

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger


def load_config(project_root: Path | None = None) -> Config:
    """Load configuration from all sources.

    Sources are merged from lowest to highest precedence: defaults, user
    file, project file, environment.

    Args:
        project_root: Project root containing `.speck/`. Auto-detected if None.

    Returns:
        The merged configuration.

    Raises:
        ConfigLoadError: If a present config file cannot be parsed.
    """
    merged: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    for source in reversed(discover_sources(project_root)):
        values = source.values
        if source.path is not None:
            if not source.exists:
                continue
            values = read_toml_file(source.path)
        merged = deep_merge(merged, values)
    return Config.model_validate(merged)


def create_config_logger(config: Config) -> FilteringBoundLogger:
    """Create a logger honoring the logging section of a configuration.

    Args:
        config: The loaded configuration.

    Returns:
        A FilteringBoundLogger writing to the configured destination.
    """
    return create_logger(
        level=config.logging.level.value,
        log_format="json" if config.logging.format == "json" else "text",
        log_file=config.logging.file,
    )
