"""Symlink target validation and strict symlink resolution.

Every symlink the resolver follows, the `.speck/root` link and each
`.speck-link-*` child link, goes through the same checks.
"""

import errno
import os
from pathlib import Path

from speck.exceptions import (
    BrokenSymlinkError,
    SpeckIOError,
    SymlinkCycleError,
    SymlinkSecurityError,
)

#: System directories a speck root or child repository may never live in.
DENIED_SYSTEM_PATHS: tuple[str, ...] = (
    "/",
    "/etc",
    "/usr",
    "/bin",
    "/sbin",
    "/System",
    "/Library",
)

_RELINK_HINT = "/speck:link <safe-project-path>"


def get_home_dir() -> Path | None:
    """Return the user's home directory from HOME or USERPROFILE.

    Returns:
        The home directory, or None if neither variable is set.
    """
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""
    return Path(home) if home else None


def _normalize(path: str | os.PathLike[str]) -> str:
    return os.path.normpath(os.fspath(path))


def _is_within(path: str, denied: str) -> bool:
    if path == denied:
        return True
    # Only the root itself is denied; everything is a descendant of "/".
    if denied == "/":
        return False
    return path.startswith(denied + "/")


def _remove_hint(link: Path | None) -> str:
    target = str(link) if link is not None else "<symlink>"
    return f"Fix: rm {target} && {_RELINK_HINT}"


def validate_symlink_target(
    resolved: str | os.PathLike[str],
    *,
    link: Path | None = None,
    home: Path | None = None,
) -> None:
    """Reject resolved symlink targets that point somewhere dangerous.

    Rules, in order:

    1. The target may not be, or live under, a system directory in
       `DENIED_SYSTEM_PATHS`.
    2. The target may not be the parent directory of the user's home.

    Args:
        resolved: Fully resolved (symlink-free) absolute target path.
        link: The symlink that produced the target, used in the fix hint.
        home: Home directory override. Defaults to HOME/USERPROFILE.

    Raises:
        SymlinkSecurityError: If the target is rejected.
    """
    target = _normalize(resolved)
    label = link.name if link is not None else "symlink"

    for denied in DENIED_SYSTEM_PATHS:
        if _is_within(target, denied):
            msg = (
                f"Security: {label} points to system directory: {target}\n"
                "Speck root must be a user-owned project directory."
            )
            raise SymlinkSecurityError(
                msg, path=target, link=link, remediation=_remove_hint(link)
            )

    home_dir = home if home is not None else get_home_dir()
    if home_dir is None:
        return

    home_parent = os.path.dirname(os.path.realpath(home_dir))
    if target == home_parent:
        msg = f"Security: {label} points above home directory: {target}"
        raise SymlinkSecurityError(
            msg, path=target, link=link, remediation=_remove_hint(link)
        )


def read_link_target(link: Path) -> str:
    """Return the raw target stored in a symlink, or "unknown"."""
    try:
        return os.readlink(link)
    except OSError:
        return "unknown"


def resolve_link(link: Path) -> Path:
    """Resolve a symlink to its final existing target.

    Args:
        link: The symlink to resolve.

    Returns:
        The absolute, symlink-free target.

    Raises:
        SymlinkCycleError: If the link chain loops.
        BrokenSymlinkError: If the final target does not exist.
        SpeckIOError: If the link cannot be resolved for any other reason,
            such as a permission error on a path component.
    """
    try:
        resolved = os.path.realpath(link, strict=True)
    except OSError as e:
        if e.errno == errno.ELOOP:
            msg = f"Multi-repo configuration broken: {link} contains circular reference"
            raise SymlinkCycleError(
                msg,
                link=link,
                remediation=f"Fix: rm {link} && /speck:link <valid-path>",
            ) from e
        if e.errno in (errno.ENOENT, errno.ENOTDIR):
            raise _broken_link_error(link) from e
        msg = f"Failed to resolve symlink {link}: {e}"
        raise SpeckIOError(msg, path=link, operation="resolve", cause=e) from e

    if not os.access(resolved, os.F_OK):
        raise _broken_link_error(link)
    return Path(resolved)


def _broken_link_error(link: Path) -> BrokenSymlinkError:
    target = read_link_target(link)
    msg = f"Multi-repo configuration broken: {link} -> {target} (does not exist)"
    remediation = (
        "Fix:\n"
        f"  1. Remove broken symlink: rm {link}\n"
        "  2. Link to correct location: /speck:link <path-to-speck-root>"
    )
    return BrokenSymlinkError(msg, link=link, target=target, remediation=remediation)
