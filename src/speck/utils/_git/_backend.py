# ruff: noqa: TC003  # Path needed at runtime for Protocol method bodies
"""Git backends used for topology and branch detection.

Topology detection only asks git whether a repository is present, where
the current checkout's top level is, and which branch HEAD points at.
Both backends answer None or False when git is unavailable so callers can
degrade gracefully.
"""

import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from speck.utils._git._common import (
    discover_repo,
    get_worktree_dir,
    has_git,
    read_head_branch,
)

_MAX_RETRIES = 3
_BASE_DELAY = 0.1
_DEFAULT_TIMEOUT = 10.0


@runtime_checkable
class GitBackend(Protocol):
    """Protocol for the git queries the core depends on."""

    def toplevel(self, cwd: Path) -> Path | None:
        """Return the top level of the checkout containing ``cwd``.

        Args:
            cwd: Directory to start from.

        Returns:
            Absolute path to the checkout root, or None without git.
        """
        ...

    def has_repo(self, cwd: Path) -> bool:
        """Return True if a git repository is available from ``cwd``."""
        ...

    def current_branch(self, cwd: Path) -> str | None:
        """Return the short name of the branch checked out at ``cwd``.

        Args:
            cwd: Directory inside the checkout.

        Returns:
            Branch name, "HEAD" when detached, or None without git.
        """
        ...


class DulwichGitBackend:
    """Git backend reading repository state directly with dulwich."""

    def toplevel(self, cwd: Path) -> Path | None:
        repo = discover_repo(cwd)
        if repo is None:
            return None
        try:
            return get_worktree_dir(repo).resolve()
        finally:
            repo.close()

    def has_repo(self, cwd: Path) -> bool:
        return has_git(cwd)

    def current_branch(self, cwd: Path) -> str | None:
        repo = discover_repo(cwd)
        if repo is None:
            return None
        try:
            return read_head_branch(repo)
        finally:
            repo.close()


@dataclass(frozen=True, slots=True)
class GitCommandResult:
    """Result of running a git command.

    Attributes:
        exit_code: Process exit code.
        stdout: Standard output, decoded.
        stderr: Standard error, decoded.
    """

    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True, slots=True)
class SubprocessGitBackend:
    """Git backend that shells out to the ``git`` executable.

    Attributes:
        executable: Name or path of the git binary.
        timeout: Per-command timeout in seconds.
    """

    executable: str = "git"
    timeout: float = field(default=_DEFAULT_TIMEOUT)

    def run(self, args: list[str], cwd: Path) -> GitCommandResult | None:
        """Run a git command, retrying on transient BlockingIOError.

        Args:
            args: Arguments after the executable.
            cwd: Working directory for the command.

        Returns:
            The command result, or None if git could not be executed.
        """
        cmd = [self.executable, *args]
        for attempt in range(_MAX_RETRIES):
            try:
                completed = subprocess.run(  # noqa: S603
                    cmd,
                    cwd=cwd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except BlockingIOError:
                time.sleep(_BASE_DELAY * (1 << attempt))
                continue
            except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired):
                return None
            return GitCommandResult(
                exit_code=completed.returncode,
                stdout=completed.stdout,
                stderr=completed.stderr,
            )
        return None

    def toplevel(self, cwd: Path) -> Path | None:
        result = self.run(["rev-parse", "--show-toplevel"], cwd)
        if result is None or not result.ok:
            return None
        return Path(result.stdout.strip())

    def has_repo(self, cwd: Path) -> bool:
        result = self.run(["rev-parse", "--git-dir"], cwd)
        return result is not None and result.ok

    def current_branch(self, cwd: Path) -> str | None:
        result = self.run(["rev-parse", "--abbrev-ref", "HEAD"], cwd)
        if result is None or not result.ok:
            return None
        return result.stdout.strip() or None


@dataclass(slots=True)
class FakeGitBackend:
    """Fake git backend for testing.

    Attributes:
        root: Checkout top level to report, or None to simulate no git.
        branch: Branch to report, or None to simulate no git.
        calls: Number of queries made, for cache assertions.

    Example:
        >>> git = FakeGitBackend(root=Path("/fake/repo"), branch="main")
        >>> git.current_branch(Path("/fake/repo"))
        'main'
    """

    root: Path | None = None
    branch: str | None = None
    calls: int = 0

    def toplevel(self, cwd: Path) -> Path | None:  # noqa: ARG002
        self.calls += 1
        return self.root

    def has_repo(self, cwd: Path) -> bool:  # noqa: ARG002
        self.calls += 1
        return self.root is not None

    def current_branch(self, cwd: Path) -> str | None:  # noqa: ARG002
        self.calls += 1
        return self.branch
