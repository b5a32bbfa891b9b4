"""Linking a child repository's contracts to the shared spec."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from speck.topology import RepoMode, RootResolver
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def sync_shared_contracts(
    feature_name: str,
    root_resolver: RootResolver | None = None,
    *,
    logger: FilteringBoundLogger | None = None,
) -> bool:
    """Link local `specs/<feature>/contracts` to the shared contracts.

    Only applies to multi-repo children, when the shared contracts directory
    and the local feature directory both exist. A correct link is kept, a link
    to anywhere else is replaced, and a real directory is never touched.

    Args:
        feature_name: Feature directory name, e.g. "007-multi-repo".
        root_resolver: Topology resolver. Defaults to one for the process cwd.
        logger: Logger for skipped or failed links.

    Returns:
        True if the local contracts path is a link to the shared directory.
    """
    log = logger if logger is not None else get_default_logger()
    resolver = root_resolver if root_resolver is not None else RootResolver(logger=log)
    topology = resolver.detect_topology()

    # The root repository already owns the shared directory.
    if topology.mode is not RepoMode.MULTI_REPO or not topology.is_multi_repo_child:
        return False

    shared = topology.specs_dir / feature_name / "contracts"
    local_feature_dir = topology.repo_root / "specs" / feature_name
    if not shared.is_dir() or not local_feature_dir.is_dir():
        return False

    link = local_feature_dir / "contracts"
    if link.is_symlink():
        if os.path.realpath(link) == os.path.realpath(shared):
            return True
        log.info("replacing stale contracts link", link=str(link))
        link.unlink()
    elif link.exists():
        log.warning(
            "local contracts directory is not a symlink, preserving it",
            local=str(link),
            shared=str(shared),
        )
        return False

    relative = os.path.relpath(shared, local_feature_dir)
    try:
        link.symlink_to(relative, target_is_directory=True)
    except OSError as e:
        log.warning("failed to create contracts link", link=str(link), error=str(e))
        return False
    return True
