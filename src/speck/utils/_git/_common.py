"""Common git utility functions.

This module provides shared helpers for repository discovery, branch
inspection, linked-worktree resolution and ref-name validation.
"""

import re
from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.refs import check_ref_format
from dulwich.repo import Repo

_GITDIR_PATTERN = re.compile(r"gitdir:\s*(.+)")
_SYMREF_PREFIX = b"ref: "


def decode_bytes(value: bytes | str) -> str:
    """Decode bytes to str if needed.

    Args:
        value: A bytes or str value.

    Returns:
        The value as a string.
    """
    if isinstance(value, bytes):
        return value.decode()
    return value


def discover_repo(cwd: Path | str | None = None) -> Repo | None:
    """Discover git repository from the given directory.

    Args:
        cwd: Directory to start search from. If None, uses current directory.

    Returns:
        Repo instance if found, None otherwise.
    """
    try:
        if cwd is not None:
            return Repo.discover(str(cwd))
        return Repo.discover()
    except NotGitRepository:
        return None


def get_worktree_dir(repo: Repo) -> Path:
    """Get the working tree directory for a repository.

    Args:
        repo: The repository instance.

    Returns:
        Path to the working tree directory.
    """
    path = Path(decode_bytes(repo.path))
    # If path is .git directory, return parent
    if path.name == ".git":
        return path.parent
    return path


def strip_refs_heads(branch: bytes | str | None) -> str | None:
    """Strip refs/heads/ prefix from a branch reference.

    Args:
        branch: Branch reference (bytes or str), possibly with refs/heads/ prefix.

    Returns:
        Branch name without prefix, or None if input is None.
    """
    if branch is None:
        return None
    branch_str = decode_bytes(branch)
    if branch_str.startswith("refs/heads/"):
        return branch_str[11:]
    return branch_str


def read_head_branch(repo: Repo) -> str | None:
    """Read the branch HEAD points at without following it.

    Works on unborn branches (fresh repositories with no commits). A detached
    HEAD is reported as the literal "HEAD", matching
    ``git rev-parse --abbrev-ref HEAD``.

    Args:
        repo: The repository instance.

    Returns:
        The short branch name, "HEAD" when detached, or None if HEAD is
        missing.
    """
    contents = repo.refs.read_ref(b"HEAD")
    if contents is None:
        return None
    if contents.startswith(_SYMREF_PREFIX):
        return strip_refs_heads(contents[len(_SYMREF_PREFIX) :].strip())
    return "HEAD"


def resolve_main_repo_root(repo_root: Path) -> Path:
    """Resolve a linked worktree to the root of its main repository.

    A linked worktree has a ``.git`` *file* containing
    ``gitdir: <main>/.git/worktrees/<name>``. The main repository root is
    three levels above that pointer. Any other layout, including submodule
    ``.git`` files, returns ``repo_root`` unchanged.

    Args:
        repo_root: Top level of the checkout that was entered.

    Returns:
        The main repository root, or ``repo_root`` if it is not a linked
        worktree.
    """
    git_path = repo_root / ".git"
    if not git_path.is_file():
        return repo_root

    try:
        content = git_path.read_text(encoding="utf-8")
    except OSError:
        return repo_root

    match = _GITDIR_PATTERN.search(content)
    if match is None:
        return repo_root

    git_dir = Path(match.group(1).strip())
    if not git_dir.is_absolute():
        git_dir = repo_root / git_dir

    # <main>/.git/worktrees/<name>
    worktrees_dir = git_dir.parent
    if worktrees_dir.name != "worktrees":
        return repo_root
    return worktrees_dir.parent.parent


def has_git(cwd: Path | None = None) -> bool:
    """Check whether a git repository is available from ``cwd``.

    Args:
        cwd: Directory to check. Defaults to the current working directory.

    Returns:
        True if ``cwd/.git`` exists or a repository is discoverable.
    """
    start = cwd if cwd is not None else Path.cwd()
    if (start / ".git").exists():
        return True

    repo = discover_repo(start)
    if repo is None:
        return False
    repo.close()
    return True


def validate_branch_name(branch_name: str) -> bool:
    """Check a branch name against git's ref-format rules.

    Public helper for callers about to create a git branch. Stored branch
    mappings use the looser `BRANCH_NAME_PATTERN` and do not call it.

    Args:
        branch_name: Short branch name (without refs/heads/).

    Returns:
        True if ``refs/heads/<branch_name>`` is a valid ref name.
    """
    if not branch_name or branch_name.startswith("-"):
        return False
    return bool(check_ref_format(b"refs/heads/" + branch_name.encode()))
