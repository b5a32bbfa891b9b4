"""Migration of 1.x branch mapping documents to the current schema."""

from speck.branches._models import (
    LEGACY_VERSION_PREFIX,
    BranchMapping,
    LegacyBranchMapping,
)


def is_legacy_document(data: object) -> bool:
    """Check whether a parsed document declares a 1.x schema version."""
    if not isinstance(data, dict):
        return False
    version = data.get("version")  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
    return isinstance(version, str) and version.startswith(LEGACY_VERSION_PREFIX)


def migrate_legacy_mapping(data: object) -> BranchMapping:
    """Upgrade a 1.x document to the current schema.

    Entries keep their order; `baseBranch`, `status` and `pr` are dropped and
    the spec index is rebuilt from the surviving entries.

    Args:
        data: The parsed legacy document.

    Returns:
        The equivalent current-version mapping.

    Raises:
        pydantic.ValidationError: If the legacy document itself is invalid.
    """
    legacy = LegacyBranchMapping.model_validate(data)
    return BranchMapping.from_branches(entry.to_current() for entry in legacy.branches)
