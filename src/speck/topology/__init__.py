"""Repository topology resolution.

Detects whether the current checkout is a standalone repository, the root
of a multi-repo constellation, or a child linked into one, and follows the
joining symlinks safely.

Example:
    >>> from speck.topology import RootResolver
    >>> topology = RootResolver().detect_topology()
    >>> topology.mode
    <RepoMode.SINGLE_REPO: 'single-repo'>
"""

from speck.topology._discovery import (
    CHILD_LINK_PREFIX,
    find_child_repos,
    find_child_repos_with_names,
    get_child_repo_name,
)
from speck.topology._models import RepoContext, RepoMode, RepoTopology
from speck.topology._resolver import (
    SPECK_ROOT_LINK,
    RootResolver,
    TopologyCache,
    detect_topology,
)
from speck.topology._security import (
    DENIED_SYSTEM_PATHS,
    get_home_dir,
    resolve_link,
    validate_symlink_target,
)

__all__ = [
    "CHILD_LINK_PREFIX",
    "DENIED_SYSTEM_PATHS",
    "SPECK_ROOT_LINK",
    "RepoContext",
    "RepoMode",
    "RepoTopology",
    "RootResolver",
    "TopologyCache",
    "detect_topology",
    "find_child_repos",
    "find_child_repos_with_names",
    "get_child_repo_name",
    "get_home_dir",
    "resolve_link",
    "validate_symlink_target",
]
