# pyright: reportAny=false
"""Persistent branch to spec mapping stored in `.speck/branches.json`.

The mapping has no cache: every mutating operation re-reads the document,
applies the change in memory and writes it back atomically. There is no
cross-process locking; concurrent writers are last-writer-wins.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from speck.branches._migration import is_legacy_document, migrate_legacy_mapping
from speck.branches._models import (
    BRANCH_NAME_PATTERN,
    CURRENT_VERSION,
    SPEC_ID_PATTERN,
    BranchEntry,
    BranchMapping,
    rebuild_spec_index,
    utc_timestamp,
)
from speck.exceptions import (
    BranchEntryValidationError,
    BranchMappingCorruptError,
    BranchNotFoundError,
    DuplicateBranchError,
    InvalidBranchMappingError,
)
from speck.utils._io import read_json_bytes, write_json_atomic
from speck.utils._logging import get_default_logger

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

#: Location of the mapping document, relative to a repository root.
BRANCHES_FILE = Path(".speck") / "branches.json"

_BRANCH_NAME_RE = re.compile(BRANCH_NAME_PATTERN)
_SPEC_ID_RE = re.compile(SPEC_ID_PATTERN)


def branches_path(repo_root: Path) -> Path:
    return repo_root / BRANCHES_FILE


def empty_mapping() -> BranchMapping:
    """Return a current-version mapping with no branches."""
    return BranchMapping(version=CURRENT_VERSION)


def _format_validation_error(error: ValidationError) -> str:
    lines: list[str] = []
    for detail in error.errors():
        loc = ".".join(str(part) for part in detail["loc"]) or "<root>"
        lines.append(f"  {loc}: {detail['msg']}")
    return "\n".join(lines)


def _corrupt(path: Path, details: str) -> BranchMappingCorruptError:
    msg = (
        f"Corrupted branches.json at {path} - restore from git history:\n"
        f"  git show HEAD:{BRANCHES_FILE.as_posix()} > {BRANCHES_FILE.as_posix()}\n\n"
        f"Validation errors:\n{details}"
    )
    return BranchMappingCorruptError(msg, path=path)


def read_branch_mapping(
    repo_root: Path,
    *,
    persist_migration: bool = True,
    logger: FilteringBoundLogger | None = None,
) -> BranchMapping:
    """Read the branch mapping of a repository.

    A missing document yields an empty mapping. A 1.x document is migrated
    and, unless `persist_migration` is False, written back before returning.

    Args:
        repo_root: Repository root containing `.speck/`.
        persist_migration: Write a migrated document back to disk.
        logger: Logger for migration events.

    Returns:
        The validated mapping.

    Raises:
        BranchMappingCorruptError: If the document is not valid JSON, fails
            validation, or declares an unsupported version.
        SpeckIOError: If the document exists but cannot be read.
    """
    path = branches_path(repo_root)
    try:
        raw = read_json_bytes(path)
    except FileNotFoundError:
        return empty_mapping()

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise _corrupt(path, f"  invalid JSON: {e}") from e

    if is_legacy_document(data):
        try:
            mapping = migrate_legacy_mapping(data)
        except ValidationError as e:
            raise _corrupt(path, _format_validation_error(e)) from e

        log = logger if logger is not None else get_default_logger()
        log.info(
            "migrated branch mapping",
            path=str(path),
            from_version=data["version"],
            to_version=CURRENT_VERSION,
            branches=len(mapping.branches),
        )
        if persist_migration:
            write_branch_mapping(repo_root, mapping)
        return mapping

    try:
        return BranchMapping.model_validate(data)
    except ValidationError as e:
        raise _corrupt(path, _format_validation_error(e)) from e


def write_branch_mapping(repo_root: Path, mapping: BranchMapping) -> None:
    """Validate a mapping and write it atomically.

    Args:
        repo_root: Repository root; `.speck/` is created if missing.
        mapping: The mapping to persist.

    Raises:
        InvalidBranchMappingError: If the mapping fails validation.
        SpeckIOError: If the write fails.
    """
    document = mapping.to_document()
    try:
        _ = BranchMapping.model_validate(document)
    except ValidationError as e:
        msg = f"Refusing to write invalid branch mapping:\n{_format_validation_error(e)}"
        raise InvalidBranchMappingError(msg) from e

    write_json_atomic(branches_path(repo_root), document)


def create_entry(
    name: str,
    spec_id: str,
    parent_spec_id: str | None = None,
) -> BranchEntry:
    """Create a branch entry stamped with the current time.

    Args:
        name: Git branch name.
        spec_id: Spec the branch maps to (`NNN-slug`).
        parent_spec_id: Spec the branch stacks on, if any.

    Returns:
        The new entry, with `created_at` equal to `updated_at`.

    Raises:
        BranchEntryValidationError: If a field does not match its pattern.
    """
    if not _BRANCH_NAME_RE.fullmatch(name):
        msg = f"Invalid branch name {name!r}: must match {BRANCH_NAME_PATTERN}"
        raise BranchEntryValidationError(msg, field="name", value=name)
    if not _SPEC_ID_RE.fullmatch(spec_id):
        msg = f"Invalid spec ID {spec_id!r}: must match NNN-feature-name"
        raise BranchEntryValidationError(msg, field="spec_id", value=spec_id)
    if parent_spec_id is not None and not _SPEC_ID_RE.fullmatch(parent_spec_id):
        msg = f"Invalid parent spec ID {parent_spec_id!r}: must match NNN-feature-name"
        raise BranchEntryValidationError(
            msg, field="parent_spec_id", value=parent_spec_id
        )

    now = utc_timestamp()
    return BranchEntry(
        name=name,
        spec_id=spec_id,
        created_at=now,
        updated_at=now,
        parent_spec_id=parent_spec_id,
    )


def add_branch(mapping: BranchMapping, entry: BranchEntry) -> BranchMapping:
    """Return a new mapping with `entry` appended and the index rebuilt.

    Raises:
        DuplicateBranchError: If a branch with the same name already exists.
    """
    if find_branch_entry(mapping, entry.name) is not None:
        msg = f"Branch '{entry.name}' already exists in mapping"
        raise DuplicateBranchError(msg, name=entry.name)
    return BranchMapping.from_branches((*mapping.branches, entry))


def remove_branch(mapping: BranchMapping, name: str) -> BranchMapping:
    """Return a new mapping without the named branch, index rebuilt.

    Raises:
        BranchNotFoundError: If no branch has that name.
    """
    if find_branch_entry(mapping, name) is None:
        msg = f"Branch '{name}' not found in mapping"
        raise BranchNotFoundError(msg, name=name)
    return BranchMapping.from_branches(b for b in mapping.branches if b.name != name)


def find_branch_entry(mapping: BranchMapping, name: str) -> BranchEntry | None:
    return next((b for b in mapping.branches if b.name == name), None)


def get_spec_for_branch(mapping: BranchMapping, name: str) -> str | None:
    entry = find_branch_entry(mapping, name)
    return entry.spec_id if entry is not None else None


def get_branches_for_spec(mapping: BranchMapping, spec_id: str) -> list[str]:
    return list(mapping.spec_index.get(spec_id, ()))


def validate_branch_mapping(mapping: BranchMapping) -> list[str]:
    """Check a mapping's derived index against its branch list.

    Mappings built through `model_construct` skip model validation, so the
    checks here do not rely on it.

    Args:
        mapping: The mapping to check.

    Returns:
        Human-readable problems; empty when the mapping is consistent.
    """
    problems: list[str] = []
    names = [b.name for b in mapping.branches]

    seen: set[str] = set()
    for name in names:
        if name in seen:
            problems.append(f"Duplicate branch name: '{name}'")
        seen.add(name)

    for entry in mapping.branches:
        if entry.name not in mapping.spec_index.get(entry.spec_id, ()):
            problems.append(
                f"Index inconsistency: branch '{entry.name}' missing from "
                f"specIndex['{entry.spec_id}']"
            )

    expected = rebuild_spec_index(mapping.branches)
    for spec_id, branch_names in mapping.spec_index.items():
        for name in branch_names:
            if name not in expected.get(spec_id, ()):
                problems.append(
                    f"Orphaned index entry: branch '{name}' in specIndex['{spec_id}'] "
                    "but not in branches"
                )

    return problems


def register_branch(
    repo_root: Path,
    name: str,
    spec_id: str,
    parent_spec_id: str | None = None,
    *,
    logger: FilteringBoundLogger | None = None,
) -> BranchMapping:
    """Record a branch in a repository's mapping and persist it.

    Re-reads the document first so the write is based on the latest state.

    Args:
        repo_root: Repository root containing `.speck/`.
        name: Git branch name.
        spec_id: Spec the branch maps to.
        parent_spec_id: Spec the branch stacks on, if any.
        logger: Logger for migration events during the read.

    Returns:
        The mapping as written.

    Raises:
        BranchEntryValidationError: If a field is invalid.
        DuplicateBranchError: If the branch is already registered. The
            document on disk is left unchanged.
    """
    mapping = read_branch_mapping(repo_root, logger=logger)
    updated = add_branch(mapping, create_entry(name, spec_id, parent_spec_id))
    write_branch_mapping(repo_root, updated)
    return updated
