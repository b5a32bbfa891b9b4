"""Shared utilities for Speck: git access, JSON I/O and logging."""

from speck.utils._git import (
    DulwichGitBackend,
    FakeGitBackend,
    GitBackend,
    GitCommandResult,
    SubprocessGitBackend,
    has_git,
    resolve_main_repo_root,
    validate_branch_name,
)
from speck.utils._io import atomic_write, read_json_bytes, write_json_atomic
from speck.utils._logging import LogFormatType, create_logger, get_default_logger

__all__ = [
    "DulwichGitBackend",
    "FakeGitBackend",
    "GitBackend",
    "GitCommandResult",
    "LogFormatType",
    "SubprocessGitBackend",
    "atomic_write",
    "create_logger",
    "get_default_logger",
    "has_git",
    "read_json_bytes",
    "resolve_main_repo_root",
    "validate_branch_name",
    "write_json_atomic",
]
