"""Feature directory lookup and full path resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from speck.branches import get_spec_for_branch, read_branch_mapping
from speck.features._branch import FEATURE_PREFIX_RE, detect_current_branch
from speck.features._paths import FeaturePaths, build_feature_paths
from speck.topology import RootResolver
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from speck.branches import BranchMapping
    from speck.config import Config


class FeatureDirSource(StrEnum):
    """How a feature directory was chosen."""

    MAPPING = "mapping"
    PREFIX = "prefix"
    LITERAL = "literal"


@dataclass(frozen=True, slots=True)
class FeatureDirLookup:
    """Result of locating a branch's feature directory.

    Attributes:
        path: The feature directory. May not exist for literal fallbacks.
        source: Which rule selected it.
        warning: Set when several directories share the branch's prefix.
    """

    path: Path
    source: FeatureDirSource
    warning: str | None = None


def _prefix_matches(specs_dir: Path, prefix: str) -> list[str]:
    try:
        entries = list(os.scandir(specs_dir))
    except (FileNotFoundError, NotADirectoryError):
        return []
    return sorted(e.name for e in entries if e.is_dir() and e.name.startswith(f"{prefix}-"))


def find_feature_dir(
    specs_dir: Path,
    branch: str,
    mapping: BranchMapping,
    *,
    logger: FilteringBoundLogger | None = None,
) -> FeatureDirLookup:
    """Locate the feature directory for a branch.

    A mapping entry for `branch` wins. Otherwise a `NNN-` branch selects the
    single directory sharing its numeric prefix. No match, more than one
    match, or a branch without a prefix falls back to `specs_dir/branch`.

    Args:
        specs_dir: Shared specs directory.
        branch: Current branch name.
        mapping: Branch mapping of the local repository.
        logger: Logger for ambiguous-prefix warnings.

    Returns:
        The chosen directory and how it was chosen.
    """
    spec_id = get_spec_for_branch(mapping, branch)
    if spec_id is not None:
        return FeatureDirLookup(specs_dir / spec_id, FeatureDirSource.MAPPING)

    match = FEATURE_PREFIX_RE.match(branch)
    if match is None:
        return FeatureDirLookup(specs_dir / branch, FeatureDirSource.LITERAL)

    prefix = match.group(1)
    matches = _prefix_matches(specs_dir, prefix)
    if len(matches) == 1:
        return FeatureDirLookup(specs_dir / matches[0], FeatureDirSource.PREFIX)

    if len(matches) > 1:
        warning = (
            f"Multiple spec directories found with prefix '{prefix}': "
            f"{', '.join(matches)}. Ensure only one spec directory exists "
            "per numeric prefix."
        )
        log = logger if logger is not None else get_default_logger()
        log.warning("ambiguous spec prefix", prefix=prefix, matches=matches)
        return FeatureDirLookup(specs_dir / branch, FeatureDirSource.LITERAL, warning)

    return FeatureDirLookup(specs_dir / branch, FeatureDirSource.LITERAL)


class FeaturePathResolver:
    """Resolves the artifact paths of the active feature.

    Args:
        root_resolver: Topology resolver. Its git backend is reused for
            branch detection. Defaults to a resolver for the process cwd.
        config: Loaded configuration; supplies the branch override.
        logger: Logger for soft-fallback warnings.
    """

    def __init__(
        self,
        root_resolver: RootResolver | None = None,
        *,
        config: Config | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else get_default_logger()
        )
        self._root: RootResolver = (
            root_resolver
            if root_resolver is not None
            else RootResolver(logger=self._logger)
        )
        self._override: str | None = (
            config.feature_override if config is not None else None
        )

    @property
    def root_resolver(self) -> RootResolver:
        return self._root

    def current_branch(self) -> str:
        topology = self._root.detect_topology()
        return detect_current_branch(
            self._root.git,
            topology.worktree_root,
            topology.specs_dir,
            override=self._override,
        )

    def resolve(self) -> FeaturePaths:
        """Resolve every artifact path for the current branch.

        Returns:
            The feature paths, with soft-fallback warnings attached.

        Raises:
            ConfigurationError: If topology detection fails.
            BranchMappingCorruptError: If the local `branches.json` is corrupt.
        """
        topology = self._root.detect_topology()
        branch = self.current_branch()
        has_git_repo = self._root.git.has_repo(self._root.cwd)

        mapping = read_branch_mapping(topology.repo_root, logger=self._logger)
        lookup = find_feature_dir(
            topology.specs_dir, branch, mapping, logger=self._logger
        )
        self._logger.debug(
            "resolved feature directory",
            branch=branch,
            feature_dir=str(lookup.path),
            source=str(lookup.source),
        )

        return build_feature_paths(
            mode=topology.mode,
            speck_root=topology.speck_root,
            specs_dir=topology.specs_dir,
            repo_root=topology.repo_root,
            current_branch=branch,
            has_git=has_git_repo,
            feature_dir=lookup.path,
            warnings=(lookup.warning,) if lookup.warning else (),
        )


def resolve_feature_paths(
    root_resolver: RootResolver | None = None,
    *,
    config: Config | None = None,
    logger: FilteringBoundLogger | None = None,
) -> FeaturePaths:
    """Resolve feature paths with a one-off resolver."""
    return FeaturePathResolver(root_resolver, config=config, logger=logger).resolve()
