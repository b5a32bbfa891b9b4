"""Child repository discovery under a speck root."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from speck.exceptions import ConfigurationError, SpeckIOError
from speck.topology._security import resolve_link, validate_symlink_target
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

#: Name prefix of the symlinks that join a child repository to a speck root.
CHILD_LINK_PREFIX = ".speck-link-"


def find_child_repos_with_names(
    speck_root: Path,
    *,
    logger: FilteringBoundLogger | None = None,
    home: Path | None = None,
) -> dict[str, Path]:
    """Find child repositories linked into a speck root.

    Direct entries of `speck_root` named `.speck-link-<name>` that are
    symlinks are resolved and checked. Rejected or non-git targets are
    skipped with a warning; they never abort the scan.

    Args:
        speck_root: Directory to scan.
        logger: Logger for skipped links. Defaults to a stderr logger.
        home: Home directory override for the symlink guard.

    Returns:
        Logical child name to resolved repository path, in name order.
        Empty if `speck_root` does not exist.
    """
    log = logger if logger is not None else get_default_logger()

    try:
        entries = sorted(os.scandir(speck_root), key=lambda e: e.name)
    except (FileNotFoundError, NotADirectoryError):
        return {}

    children: dict[str, Path] = {}
    for entry in entries:
        if not entry.name.startswith(CHILD_LINK_PREFIX) or not entry.is_symlink():
            continue

        link = Path(entry.path)
        name = entry.name[len(CHILD_LINK_PREFIX) :]
        try:
            target = resolve_link(link)
            validate_symlink_target(target, link=link, home=home)
        except (ConfigurationError, SpeckIOError) as e:
            log.warning("skipping child repo link", link=str(link), reason=str(e))
            continue

        if not (target / ".git").exists():
            log.warning(
                "skipping child repo link without git repository",
                link=str(link),
                target=str(target),
            )
            continue

        log.debug("found child repo", name=name, path=str(target))
        children[name] = target

    return children


def find_child_repos(
    speck_root: Path,
    *,
    logger: FilteringBoundLogger | None = None,
    home: Path | None = None,
) -> list[Path]:
    """Find child repository paths linked into a speck root.

    Args:
        speck_root: Directory to scan.
        logger: Logger for skipped links.
        home: Home directory override for the symlink guard.

    Returns:
        Resolved child repository paths, ordered by link name.
    """
    return list(
        find_child_repos_with_names(speck_root, logger=logger, home=home).values()
    )


def get_child_repo_name(repo_root: Path, speck_root: Path) -> str:
    """Return the logical name a speck root uses for a child repository.

    Looks for a `.speck-link-<name>` symlink under `speck_root` that resolves
    to `repo_root`. Falls back to the directory name of `repo_root`.
    """
    resolved_repo = os.path.realpath(repo_root)
    try:
        entries = sorted(os.scandir(speck_root), key=lambda e: e.name)
    except (FileNotFoundError, NotADirectoryError):
        return Path(resolved_repo).name

    for entry in entries:
        if not entry.name.startswith(CHILD_LINK_PREFIX) or not entry.is_symlink():
            continue
        # Broken or cyclic links never equal an existing repo path.
        if os.path.realpath(entry.path) == resolved_repo:
            return entry.name[len(CHILD_LINK_PREFIX) :]
    return Path(resolved_repo).name
