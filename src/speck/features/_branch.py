"""Current branch detection and feature-branch checks."""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

from speck.branches import find_branch_entry, read_branch_mapping
from speck.config import FEATURE_ENV_VAR
from speck.exceptions import BranchMappingCorruptError
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from speck.utils._git import GitBackend

FEATURE_PREFIX_RE = re.compile(r"^([0-9]{3})-")
DEFAULT_BRANCH = "main"


def latest_feature_dir(specs_dir: Path) -> str | None:
    """Return the name of the highest-numbered `NNN-*` directory.

    Ties on the number keep the first name in sorted order.
    """
    try:
        entries = sorted(os.scandir(specs_dir), key=lambda e: e.name)
    except (FileNotFoundError, NotADirectoryError):
        return None

    latest: str | None = None
    highest = 0
    for entry in entries:
        if not entry.is_dir():
            continue
        match = FEATURE_PREFIX_RE.match(entry.name)
        if match is None:
            continue
        number = int(match.group(1))
        if number > highest:
            highest = number
            latest = entry.name
    return latest


def detect_current_branch(
    git: GitBackend,
    cwd: Path,
    specs_dir: Path,
    *,
    override: str | None = None,
) -> str:
    """Determine the branch that selects the active feature.

    Sources are tried in order, stopping at the first that yields a value:
    the override (or SPECIFY_FEATURE when no override is given), git HEAD,
    the highest-numbered feature directory in `specs_dir`, then "main".

    Args:
        git: Git backend queried at `cwd`.
        cwd: Checkout to read HEAD from.
        specs_dir: Directory scanned when git is unavailable.
        override: Explicit branch name.

    Returns:
        The branch name.
    """
    if override is None:
        override = os.environ.get(FEATURE_ENV_VAR)
    if override:
        return override

    branch = git.current_branch(cwd)
    if branch:
        return branch

    return latest_feature_dir(specs_dir) or DEFAULT_BRANCH


def check_feature_branch(
    branch: str,
    *,
    has_git_repo: bool,
    repo_root: Path,
    logger: FilteringBoundLogger | None = None,
) -> bool:
    """Check whether `branch` is usable as a feature branch.

    Without git the check always passes. Branches registered in the
    repository's `branches.json` pass regardless of naming; anything else
    must start with a three-digit prefix.

    Args:
        branch: Branch name to check.
        has_git_repo: Whether a git repository was found.
        repo_root: Repository whose mapping is consulted.
        logger: Logger for warnings.

    Returns:
        True if the branch may be used.
    """
    log = logger if logger is not None else get_default_logger()

    if not has_git_repo:
        log.warning("git repository not detected, skipped branch validation")
        return True

    try:
        mapping = read_branch_mapping(repo_root, persist_migration=False, logger=log)
    except BranchMappingCorruptError as e:
        log.warning("ignoring unreadable branch mapping", path=str(e.path))
    else:
        if find_branch_entry(mapping, branch) is not None:
            return True

    if FEATURE_PREFIX_RE.match(branch) is None:
        log.error(
            "not on a feature branch, expected a name like 001-feature-name",
            branch=branch,
        )
        return False
    return True
