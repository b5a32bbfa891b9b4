"""Configuration models.

This module defines the enums, source metadata and the frozen pydantic
models that make up Speck's configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from pathlib import Path


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration source names in precedence order.

    Values are ordered from highest precedence (ENV) to lowest (DEFAULT).
    """

    ENV = "env"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """Represents a configuration source.

    Attributes:
        name: The source type identifier.
        path: Path to the config file, or None for ENV and DEFAULT.
        exists: Whether the source exists.
        values: Configuration values from this source.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]  # pyright: ignore[reportExplicitAny]


class LoggingConfig(BaseModel):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    file: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def _fallback_level(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return LogLevel(value.lower())
            except ValueError:
                pass
        return LogLevel.INFO

    @field_validator("format", mode="before")
    @classmethod
    def _fallback_format(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return LogFormat(value.lower())
            except ValueError:
                pass
        return LogFormat.TEXT


class Config(BaseModel):
    """Speck configuration.

    Attributes:
        logging: Logging settings.
        feature_override: Branch name that short-circuits branch detection,
            normally taken from SPECIFY_FEATURE.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    logging: LoggingConfig = LoggingConfig()
    feature_override: str | None = None

    @field_validator("feature_override", mode="before")
    @classmethod
    def _empty_override_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
