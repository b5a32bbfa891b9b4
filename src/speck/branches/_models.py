"""Branch mapping document models.

`branches.json` holds an ordered list of branch entries and a reverse index
from spec ID to branch names. The index is always derived from the list;
the current schema rejects a document whose index disagrees.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Literal, Self

import pendulum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from collections.abc import Iterable

CURRENT_VERSION = "2.0.0"
CURRENT_MAJOR = "2"
LEGACY_VERSION_PREFIX = "1."

BRANCH_NAME_PATTERN = r"^[a-zA-Z0-9._/-]+$"
SPEC_ID_PATTERN = r"^[0-9]{3}-[a-z0-9-]+$"
VERSION_PATTERN = r"^[0-9]+\.[0-9]+\.[0-9]+$"

LegacyBranchStatus = Literal["active", "submitted", "merged", "abandoned"]


def utc_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with milliseconds and `Z`."""
    return pendulum.now("UTC").format("YYYY-MM-DD[T]HH:mm:ss.SSS[Z]")


def _check_iso_timestamp(value: str) -> str:
    try:
        _ = datetime.fromisoformat(value)
    except ValueError:
        # pendulum accepts ISO-8601 forms the stdlib parser rejects
        _ = pendulum.parse(value)
    return value


class BranchEntry(BaseModel):
    """A branch name mapped to the spec it implements.

    Attributes:
        name: Git branch name.
        spec_id: Spec directory name (`NNN-slug`).
        created_at: ISO-8601 creation timestamp.
        updated_at: ISO-8601 last-update timestamp.
        parent_spec_id: Spec this branch stacks on, if any.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    name: str = Field(pattern=BRANCH_NAME_PATTERN)
    spec_id: str = Field(pattern=SPEC_ID_PATTERN)
    created_at: str
    updated_at: str
    parent_spec_id: str | None = Field(default=None, pattern=SPEC_ID_PATTERN)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _validate_timestamp(cls, value: str) -> str:
        return _check_iso_timestamp(value)


class LegacyBranchEntry(BranchEntry):
    """A 1.x branch entry, which also tracked stacking and PR state."""

    base_branch: str | None = None
    status: LegacyBranchStatus | None = None
    pr: int | None = None

    def to_current(self) -> BranchEntry:
        """Project down to the current entry shape, dropping legacy fields."""
        return BranchEntry(
            name=self.name,
            spec_id=self.spec_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            parent_spec_id=self.parent_spec_id,
        )


def rebuild_spec_index(branches: Iterable[BranchEntry]) -> dict[str, tuple[str, ...]]:
    """Derive the spec ID to branch names index from a branch list.

    Keys and names keep the order in which they first appear in `branches`.

    Args:
        branches: Branch entries in document order.

    Returns:
        Mapping of spec ID to the names of the branches pointing at it.
    """
    index: dict[str, list[str]] = {}
    for entry in branches:
        index.setdefault(entry.spec_id, []).append(entry.name)
    return {spec_id: tuple(names) for spec_id, names in index.items()}


class BranchMapping(BaseModel):
    """The persisted `branches.json` document (schema 2.x).

    Attributes:
        version: Schema version; the major version must be 2.
        branches: Entries in creation order. Names are unique.
        spec_index: Derived reverse index; always equals
            `rebuild_spec_index(branches)`.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    version: str = Field(default=CURRENT_VERSION, pattern=VERSION_PATTERN)
    branches: tuple[BranchEntry, ...] = ()
    spec_index: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_consistency(self) -> Self:
        if self.version.split(".", 1)[0] != CURRENT_MAJOR:
            msg = f"Unsupported schema version {self.version}, expected {CURRENT_VERSION}"
            raise ValueError(msg)

        seen: set[str] = set()
        for entry in self.branches:
            if entry.name in seen:
                msg = f"Duplicate branch name: {entry.name}"
                raise ValueError(msg)
            seen.add(entry.name)

        if self.spec_index != rebuild_spec_index(self.branches):
            msg = "specIndex does not match branches"
            raise ValueError(msg)
        return self

    @classmethod
    def from_branches(cls, branches: Iterable[BranchEntry]) -> Self:
        """Build a current-version mapping, deriving the index."""
        entries = tuple(branches)
        return cls(
            version=CURRENT_VERSION,
            branches=entries,
            spec_index=rebuild_spec_index(entries),
        )

    def to_document(self) -> dict[str, object]:
        """Serialize to the on-disk JSON shape with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LegacyBranchMapping(BaseModel):
    """A 1.x `branches.json` document. Its index is ignored and rebuilt."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )

    version: str = Field(pattern=r"^1\.[0-9]+\.[0-9]+$")
    branches: tuple[LegacyBranchEntry, ...] = ()
