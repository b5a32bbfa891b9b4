"""Branch status aggregated across a speck root and its children."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from speck.branches import BranchEntry, BranchMapping, read_branch_mapping
from speck.exceptions import BranchMappingCorruptError, SpeckIOError
from speck.topology import find_child_repos_with_names
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

ROOT_REPO_NAME = "root"


@dataclass(frozen=True, slots=True)
class RepoBranchSummary:
    """Branch mapping summary for one repository.

    Attributes:
        repo_path: Repository root.
        repo_name: "root" or the child's logical link name.
        spec_id: The spec all branches map to, or None if they map to several.
        branch_count: Number of mapped branches.
        spec_counts: Branches per spec ID, in first-seen order.
        branches: The mapped branches in creation order.
    """

    repo_path: Path
    repo_name: str
    spec_id: str | None
    branch_count: int
    spec_counts: dict[str, int]
    branches: tuple[BranchEntry, ...]

    @classmethod
    def from_mapping(
        cls, repo_path: Path, repo_name: str, mapping: BranchMapping
    ) -> RepoBranchSummary:
        counts = Counter(b.spec_id for b in mapping.branches)
        spec_id = next(iter(counts)) if len(counts) == 1 else None
        return cls(
            repo_path=repo_path,
            repo_name=repo_name,
            spec_id=spec_id,
            branch_count=len(mapping.branches),
            spec_counts=dict(counts),
            branches=mapping.branches,
        )


@dataclass(frozen=True, slots=True)
class AggregatedBranchStatus:
    """Branch summaries for a speck root and every linked child.

    Repositories without mapped branches are left out.
    """

    root_repo: RepoBranchSummary | None = None
    child_repos: dict[str, RepoBranchSummary] = field(default_factory=dict)

    @property
    def total_branches(self) -> int:
        total = self.root_repo.branch_count if self.root_repo is not None else 0
        return total + sum(s.branch_count for s in self.child_repos.values())


class AggregateStatusReporter:
    """Read-only reporter over the branch mappings of a constellation.

    Mappings are read without persisting migrations. A repository whose
    mapping cannot be read is skipped with a warning.

    Args:
        speck_root: The shared speck root.
        logger: Logger for skipped repositories.
        home: Home directory override for the symlink guard.
    """

    def __init__(
        self,
        speck_root: Path,
        *,
        logger: FilteringBoundLogger | None = None,
        home: Path | None = None,
    ) -> None:
        self._speck_root: Path = speck_root
        self._logger: FilteringBoundLogger = (
            logger if logger is not None else get_default_logger()
        )
        self._home: Path | None = home

    def _summarize(self, repo_path: Path, repo_name: str) -> RepoBranchSummary | None:
        try:
            mapping = read_branch_mapping(
                repo_path, persist_migration=False, logger=self._logger
            )
        except (BranchMappingCorruptError, SpeckIOError) as e:
            self._logger.warning(
                "skipping repository with unreadable branch mapping",
                repo=repo_name,
                path=str(repo_path),
                error=str(e),
            )
            return None

        if not mapping.branches:
            return None
        return RepoBranchSummary.from_mapping(repo_path, repo_name, mapping)

    def collect(self) -> AggregatedBranchStatus:
        """Summarize the root and each child repository."""
        root = self._summarize(self._speck_root, ROOT_REPO_NAME)

        children: dict[str, RepoBranchSummary] = {}
        linked = find_child_repos_with_names(
            self._speck_root, logger=self._logger, home=self._home
        )
        for name, path in linked.items():
            summary = self._summarize(path, name)
            if summary is not None:
                children[name] = summary

        return AggregatedBranchStatus(root_repo=root, child_repos=children)


def get_aggregated_branch_status(
    speck_root: Path,
    *,
    logger: FilteringBoundLogger | None = None,
) -> AggregatedBranchStatus:
    return AggregateStatusReporter(speck_root, logger=logger).collect()
