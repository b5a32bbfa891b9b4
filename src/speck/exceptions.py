"""Speck exceptions."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from pathlib import Path


class ErrorKind(StrEnum):
    """Classification of fatal errors raised by the core.

    Soft-fallback conditions are never raised; they are logged and surfaced
    as warnings on the resolved value instead.
    """

    CONFIGURATION = "configuration"
    SECURITY = "security"
    CORRUPTION = "corruption"
    VALIDATION = "validation"
    IO = "io"


class SpeckError(Exception):
    """Base exception for Speck errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFIGURATION


class SpeckIOError(SpeckError):
    """Raised when a file cannot be read or written.

    Attributes:
        path: Path to the file that caused the error.
        operation: The operation that failed ("read", "write", "resolve").
        cause: The underlying exception that caused this error.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.IO

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        operation: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and I/O context."""
        super().__init__(message)
        self.path: Path = path
        self.operation: str = operation
        self.cause: Exception | None = cause


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(SpeckError):
    """Base exception for user-actionable configuration errors.

    Attributes:
        remediation: The command or steps that fix the problem, if known.
    """

    def __init__(self, message: str, *, remediation: str | None = None) -> None:
        """Initialize with error message and optional remediation hint."""
        full_message = f"{message}\n{remediation}" if remediation else message
        super().__init__(full_message)
        self.remediation: str | None = remediation


class ConfigLoadError(ConfigurationError):
    """Raised when a settings file cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class SymlinkSecurityError(ConfigurationError):
    """Raised when a symlink resolves to a forbidden location.

    Attributes:
        path: The resolved target that was rejected.
        link: The symlink that produced the target, if known.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.SECURITY

    def __init__(
        self,
        message: str,
        *,
        path: str,
        link: Path | None = None,
        remediation: str | None = None,
    ) -> None:
        """Initialize with error message and the rejected target."""
        super().__init__(message, remediation=remediation)
        self.path: str = path
        self.link: Path | None = link


class SymlinkCycleError(ConfigurationError):
    """Raised when a symlink chain loops back on itself."""

    def __init__(
        self, message: str, *, link: Path, remediation: str | None = None
    ) -> None:
        """Initialize with error message and the offending link."""
        super().__init__(message, remediation=remediation)
        self.link: Path = link


class BrokenSymlinkError(ConfigurationError):
    """Raised when a symlink points at a target that does not exist.

    Attributes:
        link: The dangling symlink.
        target: The raw link target as stored in the symlink.
    """

    def __init__(
        self,
        message: str,
        *,
        link: Path,
        target: str,
        remediation: str | None = None,
    ) -> None:
        """Initialize with error message and link context."""
        super().__init__(message, remediation=remediation)
        self.link: Path = link
        self.target: str = target


# =============================================================================
# Branch Mapping Exceptions
# =============================================================================


class BranchMappingError(SpeckError):
    """Base exception for branch mapping errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION


class BranchMappingCorruptError(BranchMappingError):
    """Raised when branches.json cannot be parsed or fails validation.

    Attributes:
        path: Path to the corrupt document.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.CORRUPTION

    def __init__(self, message: str, *, path: Path) -> None:
        """Initialize with error message and document path."""
        super().__init__(message)
        self.path: Path = path


class InvalidBranchMappingError(BranchMappingError, ValueError):
    """Raised when an in-memory mapping fails validation before a write."""


class BranchEntryValidationError(BranchMappingError, ValueError):
    """Raised when a branch entry field is invalid.

    Attributes:
        field: The field that failed validation.
        value: The rejected value.
    """

    def __init__(self, message: str, *, field: str, value: object) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.field: str = field
        self.value: object = value


class DuplicateBranchError(BranchMappingError, ValueError):
    """Raised when a branch name already exists in the mapping.

    Attributes:
        name: The duplicated branch name.
    """

    def __init__(self, message: str, *, name: str) -> None:
        """Initialize with error message and branch name."""
        super().__init__(message)
        self.name: str = name


class BranchNotFoundError(BranchMappingError, KeyError):
    """Raised when a branch name is not present in the mapping.

    Attributes:
        name: The missing branch name.
    """

    def __init__(self, message: str, *, name: str) -> None:
        """Initialize with error message and branch name."""
        super().__init__(message)
        self.name: str = name

    def __str__(self) -> str:
        return str(self.args[0])
