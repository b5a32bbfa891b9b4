"""Logging utilities for Speck.

This module provides a standalone structlog logger factory that writes
JSON-formatted or text-formatted logs to stderr or a log file. Each logger
is self-contained and does not modify global structlog configuration.
"""

from __future__ import annotations

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]


def _log_level_from_string(level: str | None) -> int:
    """Convert a log level string to a logging level integer.

    SPECK_DEBUG wins over everything, then the explicit level, then
    SPECK_LOG_LEVEL. Unknown names map to INFO.

    Args:
        level: Log level string (debug, info, warning, error), or None.

    Returns:
        The logging level as an integer.
    """
    if getenv("SPECK_DEBUG", None):
        return logging.DEBUG

    effective = level if level is not None else getenv("SPECK_LOG_LEVEL", "info")
    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(effective.upper(), logging.INFO)


def create_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "text",
    log_file: str = "",
) -> FilteringBoundLogger:
    """Create a standalone structlog logger.

    Args:
        level: Log level threshold (debug, info, warning, error). Falls back
            to SPECK_LOG_LEVEL, then INFO. SPECK_DEBUG forces DEBUG.
        log_format: Output format, either "json" or "text".
        log_file: Path to a log file opened in append mode. Empty writes to
            stderr.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.WriteLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(
        _log_level_from_string(level)
    )

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


def get_default_logger() -> FilteringBoundLogger:
    """Create the stderr text logger used when a component is given none."""
    return create_logger()
