"""Git utilities for Speck.

This package provides repository discovery, branch inspection, linked
worktree resolution and the pluggable git backends used by topology
detection.
"""

from speck.utils._git._backend import (
    DulwichGitBackend,
    FakeGitBackend,
    GitBackend,
    GitCommandResult,
    SubprocessGitBackend,
)
from speck.utils._git._common import (
    decode_bytes,
    discover_repo,
    get_worktree_dir,
    has_git,
    read_head_branch,
    resolve_main_repo_root,
    strip_refs_heads,
    validate_branch_name,
)

__all__ = [
    "DulwichGitBackend",
    "FakeGitBackend",
    "GitBackend",
    "GitCommandResult",
    "SubprocessGitBackend",
    "decode_bytes",
    "discover_repo",
    "get_worktree_dir",
    "has_git",
    "read_head_branch",
    "resolve_main_repo_root",
    "strip_refs_heads",
    "validate_branch_name",
]
