"""Multi-repo execution context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from speck.branches import read_branch_mapping
from speck.exceptions import BranchMappingCorruptError, SpeckIOError
from speck.features._branch import FEATURE_PREFIX_RE
from speck.topology import RepoContext, RepoTopology, RootResolver, get_child_repo_name
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


@dataclass(frozen=True, slots=True)
class MultiRepoContext:
    """Topology plus the checkout's role in a multi-repo constellation.

    Attributes:
        topology: The detected topology.
        context: Single, root or child.
        parent_spec_id: Spec a child repository implements, if known.
        child_repo_name: Logical name of a child repository.
    """

    topology: RepoTopology
    context: RepoContext
    parent_spec_id: str | None = None
    child_repo_name: str | None = None


def get_multi_repo_context(
    root_resolver: RootResolver | None = None,
    *,
    logger: FilteringBoundLogger | None = None,
) -> MultiRepoContext:
    """Describe where the current checkout sits.

    For a child repository the parent spec is the `parentSpecId` of the first
    entry in its `branches.json`, else the speck root's current branch when
    that looks like a feature branch.

    Args:
        root_resolver: Topology resolver. Defaults to one for the process cwd.
        logger: Logger for unreadable mappings.

    Returns:
        The multi-repo context.
    """
    log = logger if logger is not None else get_default_logger()
    resolver = root_resolver if root_resolver is not None else RootResolver(logger=log)
    topology = resolver.detect_topology()

    if topology.context is not RepoContext.CHILD:
        return MultiRepoContext(topology=topology, context=topology.context)

    child_name = get_child_repo_name(topology.repo_root, topology.speck_root)

    parent_spec_id: str | None = None
    try:
        mapping = read_branch_mapping(
            topology.repo_root, persist_migration=False, logger=log
        )
    except (BranchMappingCorruptError, SpeckIOError) as e:
        log.warning("cannot read child branch mapping", error=str(e))
    else:
        if mapping.branches:
            parent_spec_id = mapping.branches[0].parent_spec_id

    if parent_spec_id is None:
        root_branch = resolver.git.current_branch(topology.speck_root)
        if root_branch and FEATURE_PREFIX_RE.match(root_branch):
            parent_spec_id = root_branch

    return MultiRepoContext(
        topology=topology,
        context=RepoContext.CHILD,
        parent_spec_id=parent_spec_id,
        child_repo_name=child_name,
    )
