"""Property-based tests for the branch mapping store."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import orjson
import pytest
from hypothesis import given, settings, strategies as st

from speck.branches import (
    BranchMapping,
    add_branch,
    branches_path,
    create_entry,
    empty_mapping,
    migrate_legacy_mapping,
    read_branch_mapping,
    rebuild_spec_index,
    register_branch,
    remove_branch,
    write_branch_mapping,
)
from speck.exceptions import DuplicateBranchError

# =============================================================================
# Strategies
# =============================================================================

branch_name = st.from_regex(r"[a-zA-Z0-9][a-zA-Z0-9._/-]{0,24}", fullmatch=True)

spec_id = st.from_regex(r"[0-9]{3}-[a-z0-9][a-z0-9-]{0,12}", fullmatch=True)

# Unique branch names paired with a spec each
assignments = st.lists(
    st.tuples(branch_name, spec_id),
    min_size=0,
    max_size=12,
    unique_by=lambda pair: pair[0],
)

legacy_status = st.sampled_from(["active", "submitted", "merged", "abandoned"])

legacy_entry = st.fixed_dictionaries(
    {
        "name": branch_name,
        "specId": spec_id,
        "baseBranch": branch_name,
        "status": legacy_status,
        "pr": st.one_of(st.none(), st.integers(min_value=1, max_value=9999)),
        "createdAt": st.just("2025-11-18T10:00:00.000Z"),
        "updatedAt": st.just("2025-11-18T10:00:00.000Z"),
    }
)

legacy_document = st.builds(
    lambda branches, minor: {"version": f"1.{minor}.0", "branches": branches},
    st.lists(legacy_entry, max_size=10, unique_by=lambda e: e["name"]),
    st.integers(min_value=0, max_value=3),
)


def build_mapping(pairs: list[tuple[str, str]]) -> BranchMapping:
    mapping = empty_mapping()
    for name, spec in pairs:
        mapping = add_branch(mapping, create_entry(name, spec))
    return mapping


# =============================================================================
# Derived Index Properties
# =============================================================================


@given(pairs=assignments)
@settings(max_examples=50)
def test_index_matches_rebuild_after_adds(pairs: list[tuple[str, str]]) -> None:
    """Property: the spec index always equals one rebuilt from the branches."""
    mapping = empty_mapping()
    for name, spec in pairs:
        mapping = add_branch(mapping, create_entry(name, spec))

        assert mapping.spec_index == rebuild_spec_index(mapping.branches)


@given(pairs=assignments.filter(bool), data=st.data())
@settings(max_examples=50)
def test_index_matches_rebuild_after_remove(
    pairs: list[tuple[str, str]], data: st.DataObject
) -> None:
    """Property: removing a branch keeps the index derived."""
    mapping = build_mapping(pairs)
    name, _ = data.draw(st.sampled_from(pairs))

    updated = remove_branch(mapping, name)

    assert updated.spec_index == rebuild_spec_index(updated.branches)
    assert all(b.name != name for b in updated.branches)
    assert all(name not in names for names in updated.spec_index.values())


@given(pairs=assignments)
@settings(max_examples=50)
def test_index_lists_every_branch_once(pairs: list[tuple[str, str]]) -> None:
    """Property: every branch appears under exactly its own spec."""
    mapping = build_mapping(pairs)

    listed = [name for names in mapping.spec_index.values() for name in names]

    assert sorted(listed) == sorted(name for name, _ in pairs)
    for name, spec in pairs:
        assert name in mapping.spec_index[spec]


# =============================================================================
# Uniqueness Properties
# =============================================================================


@given(pairs=assignments.filter(bool), other_spec=spec_id, data=st.data())
@settings(max_examples=25)
def test_duplicate_registration_leaves_disk_unchanged(
    pairs: list[tuple[str, str]], other_spec: str, data: st.DataObject
) -> None:
    """Property: registering an existing name raises and does not write."""
    logger = MagicMock()
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_root = Path(tmpdir)
        for name, spec in pairs:
            _ = register_branch(repo_root, name, spec, logger=logger)
        before = branches_path(repo_root).read_bytes()
        name, _ = data.draw(st.sampled_from(pairs))

        with pytest.raises(DuplicateBranchError):
            _ = register_branch(repo_root, name, other_spec, logger=logger)

        assert branches_path(repo_root).read_bytes() == before


# =============================================================================
# Round-Trip Properties
# =============================================================================


@given(pairs=assignments, parent=st.one_of(st.none(), spec_id))
@settings(max_examples=25)
def test_write_then_read_is_identity(
    pairs: list[tuple[str, str]], parent: str | None
) -> None:
    """Property: a written mapping reads back as the same document."""
    mapping = empty_mapping()
    for name, spec in pairs:
        mapping = add_branch(mapping, create_entry(name, spec, parent))

    with tempfile.TemporaryDirectory() as tmpdir:
        repo_root = Path(tmpdir)
        write_branch_mapping(repo_root, mapping)

        restored = read_branch_mapping(repo_root, logger=MagicMock())

    assert restored.to_document() == mapping.to_document()


# =============================================================================
# Migration Properties
# =============================================================================


@given(document=legacy_document)
@settings(max_examples=50)
def test_migration_preserves_entry_count(document: dict[str, object]) -> None:
    """Property: migration keeps every entry and indexes each one once."""
    entries = document["branches"]
    assert isinstance(entries, list)

    mapping = migrate_legacy_mapping(document)

    assert mapping.version == "2.0.0"
    assert len(mapping.branches) == len(entries)
    assert sum(len(names) for names in mapping.spec_index.values()) == len(entries)


@given(document=legacy_document)
@settings(max_examples=25)
def test_migrated_document_is_current_on_disk(document: dict[str, object]) -> None:
    """Property: reading a legacy file rewrites it in the current schema."""
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_root = Path(tmpdir)
        path = branches_path(repo_root)
        path.parent.mkdir(parents=True)
        _ = path.write_bytes(orjson.dumps(document))

        mapping = read_branch_mapping(repo_root, logger=MagicMock())
        on_disk = orjson.loads(path.read_bytes())

    assert on_disk == mapping.to_document()
    assert all("status" not in entry for entry in on_disk["branches"])
