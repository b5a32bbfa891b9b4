"""Repository topology detection.

The resolver answers "where am I": the main repository root (through
linked worktrees), whether the checkout joins a multi-repo constellation,
and where the shared `specs/` directory lives. Results are memoized in a
`TopologyCache` owned by the caller.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from speck.topology._discovery import find_child_repos
from speck.topology._models import RepoTopology
from speck.topology._security import resolve_link, validate_symlink_target
from speck.utils._git import DulwichGitBackend, resolve_main_repo_root
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from speck.utils._git import GitBackend

#: Location of the speck root symlink, relative to a repository root.
SPECK_ROOT_LINK = Path(".speck") / "root"


class TopologyCache:
    """Holds one detected topology until explicitly cleared.

    Topology does not change within a single command, so a resolver only
    detects it once. Long-lived processes call `clear()` when git state may
    have changed.
    """

    __slots__ = ("_topology",)

    def __init__(self) -> None:
        self._topology: RepoTopology | None = None

    def get(self) -> RepoTopology | None:
        return self._topology

    def store(self, topology: RepoTopology) -> RepoTopology:
        self._topology = topology
        return topology

    def clear(self) -> None:
        self._topology = None


class RootResolver:
    """Detects single-repo or multi-repo topology for a working directory.

    Args:
        cwd: Working directory to resolve from. Defaults to the process cwd
            at detection time.
        git: Git backend. Defaults to `DulwichGitBackend`.
        cache: Topology cache. A private cache is created if None; pass a
            shared one to reuse detection across resolvers.
        logger: Logger for degraded-mode warnings.
        home: Home directory override for the symlink guard.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        *,
        git: GitBackend | None = None,
        cache: TopologyCache | None = None,
        logger: FilteringBoundLogger | None = None,
        home: Path | None = None,
    ) -> None:
        self._cwd: Path | None = cwd
        self._git: GitBackend = git if git is not None else DulwichGitBackend()
        self._cache: TopologyCache = cache if cache is not None else TopologyCache()
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else get_default_logger()
        )
        self._home: Path | None = home

    @property
    def cache(self) -> TopologyCache:
        return self._cache

    @property
    def git(self) -> GitBackend:
        return self._git

    @property
    def cwd(self) -> Path:
        return (self._cwd if self._cwd is not None else Path.cwd()).resolve()

    def clear_cache(self) -> None:
        """Force the next `detect_topology` call to re-detect."""
        self._cache.clear()

    def detect_topology(self) -> RepoTopology:
        """Detect the topology of the working directory.

        Returns:
            The cached topology, or a freshly detected one.

        Raises:
            SymlinkSecurityError: If a followed symlink targets a denied path.
            SymlinkCycleError: If `.speck/root` loops.
            BrokenSymlinkError: If `.speck/root` dangles.
        """
        cached = self._cache.get()
        if cached is not None:
            return cached
        return self._cache.store(self._detect())

    def _detect(self) -> RepoTopology:
        cwd = self.cwd

        toplevel = self._git.toplevel(cwd)
        if toplevel is None:
            self._logger.debug("git unavailable, using working directory", cwd=str(cwd))
            worktree_root = cwd
        else:
            worktree_root = toplevel.resolve()

        repo_root = resolve_main_repo_root(worktree_root)
        if repo_root != worktree_root:
            self._logger.debug(
                "resolved linked worktree to main repository",
                worktree=str(worktree_root),
                repo_root=str(repo_root),
            )

        # Monorepo packages carry their own link below the git root.
        if cwd not in (repo_root, worktree_root):
            package_link = cwd / SPECK_ROOT_LINK
            if package_link.is_symlink():
                speck_root = self._follow_root_link(package_link)
                return RepoTopology.multi(speck_root, cwd, worktree_root=cwd)

        link = repo_root / SPECK_ROOT_LINK
        try:
            link_stat = os.lstat(link)
        except (FileNotFoundError, NotADirectoryError):
            link_stat = None

        if link_stat is not None and not stat.S_ISLNK(link_stat.st_mode):
            self._logger.warning(
                ".speck/root exists but is not a symlink, using single-repo mode",
                path=str(link),
            )
            return RepoTopology.single(repo_root, worktree_root=worktree_root)

        if link_stat is not None:
            speck_root = self._follow_root_link(link)
            return RepoTopology.multi(speck_root, repo_root, worktree_root=worktree_root)

        children = find_child_repos(repo_root, logger=self._logger, home=self._home)
        if children:
            self._logger.debug(
                "repository is a multi-repo root", children=[str(c) for c in children]
            )
            return RepoTopology.multi(repo_root, repo_root, worktree_root=worktree_root)

        return RepoTopology.single(repo_root, worktree_root=worktree_root)

    def _follow_root_link(self, link: Path) -> Path:
        target = resolve_link(link)
        validate_symlink_target(target, link=link, home=self._home)
        return target


def detect_topology(
    cwd: Path | None = None,
    *,
    git: GitBackend | None = None,
    cache: TopologyCache | None = None,
    logger: FilteringBoundLogger | None = None,
) -> RepoTopology:
    """Detect topology with a one-off resolver.

    Args:
        cwd: Working directory to resolve from.
        git: Git backend.
        cache: Cache to consult and fill.
        logger: Logger for warnings.

    Returns:
        The detected topology.
    """
    return RootResolver(cwd, git=git, cache=cache, logger=logger).detect_topology()
