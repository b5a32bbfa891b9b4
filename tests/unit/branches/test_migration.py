"""Unit tests for legacy branch mapping migration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import orjson
import pytest

from speck.branches import (
    is_legacy_document,
    migrate_legacy_mapping,
    read_branch_mapping,
)
from speck.exceptions import BranchMappingCorruptError

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem

REPO = Path("/work/app")
BRANCHES = REPO / ".speck" / "branches.json"

LEGACY_DOCUMENT = {
    "version": "1.1.0",
    "branches": [
        {
            "name": "username/db-layer",
            "specId": "007-multi-repo",
            "baseBranch": "main",
            "status": "submitted",
            "pr": 42,
            "createdAt": "2025-11-18T10:00:00.000Z",
            "updatedAt": "2025-11-19T10:00:00.000Z",
        },
        {
            "name": "username/api",
            "specId": "007-multi-repo",
            "baseBranch": "username/db-layer",
            "status": "active",
            "pr": None,
            "createdAt": "2025-11-18T11:00:00.000Z",
            "updatedAt": "2025-11-18T11:00:00.000Z",
            "parentSpecId": "006-base",
        },
        {
            "name": "other/ui",
            "specId": "008-ui",
            "baseBranch": "main",
            "status": "merged",
            "pr": 7,
            "createdAt": "2025-11-20T10:00:00.000Z",
            "updatedAt": "2025-11-20T10:00:00.000Z",
        },
    ],
    "specIndex": {"stale": ["entries"]},
}


class TestIsLegacyDocument:
    def test_detects_1x_versions(self) -> None:
        assert is_legacy_document({"version": "1.0.0"})
        assert is_legacy_document({"version": "1.1.0"})

    def test_rejects_other_shapes(self) -> None:
        assert not is_legacy_document({"version": "2.0.0"})
        assert not is_legacy_document({"version": 1})
        assert not is_legacy_document({})
        assert not is_legacy_document(["1.0.0"])


class TestMigrateLegacyMapping:
    def test_drops_legacy_fields_and_rebuilds_index(self) -> None:
        mapping = migrate_legacy_mapping(LEGACY_DOCUMENT)

        assert mapping.version == "2.0.0"
        assert [b.name for b in mapping.branches] == [
            "username/db-layer",
            "username/api",
            "other/ui",
        ]
        assert mapping.spec_index == {
            "007-multi-repo": ("username/db-layer", "username/api"),
            "008-ui": ("other/ui",),
        }
        document = mapping.to_document()
        first = document["branches"][0]  # pyright: ignore[reportIndexIssue]
        assert set(first) == {"name", "specId", "createdAt", "updatedAt"}

    def test_keeps_timestamps_and_parent(self) -> None:
        mapping = migrate_legacy_mapping(LEGACY_DOCUMENT)

        assert mapping.branches[0].updated_at == "2025-11-19T10:00:00.000Z"
        assert mapping.branches[1].parent_spec_id == "006-base"

    def test_empty_legacy_document(self) -> None:
        mapping = migrate_legacy_mapping({"version": "1.0.0", "branches": []})

        assert mapping.branches == ()
        assert mapping.spec_index == {}


class TestReadMigratesLegacyDocument:
    def test_migrates_and_persists(self, fs: FakeFilesystem, mock_logger: MagicMock) -> None:
        fs.create_file(BRANCHES, contents=json.dumps(LEGACY_DOCUMENT))

        mapping = read_branch_mapping(REPO, logger=mock_logger)

        on_disk = orjson.loads(BRANCHES.read_bytes())
        assert on_disk == mapping.to_document()
        assert on_disk["version"] == "2.0.0"
        mock_logger.info.assert_called_once()

    def test_migration_without_persisting_leaves_file(
        self, fs: FakeFilesystem, mock_logger: MagicMock
    ) -> None:
        fs.create_file(BRANCHES, contents=json.dumps(LEGACY_DOCUMENT))
        before = BRANCHES.read_bytes()

        mapping = read_branch_mapping(REPO, persist_migration=False, logger=mock_logger)

        assert len(mapping.branches) == 3
        assert BRANCHES.read_bytes() == before

    def test_invalid_legacy_document_is_corruption(
        self, fs: FakeFilesystem, mock_logger: MagicMock
    ) -> None:
        fs.create_file(
            BRANCHES,
            contents=json.dumps(
                {"version": "1.0.0", "branches": [{"name": "x", "status": "bogus"}]}
            ),
        )

        with pytest.raises(BranchMappingCorruptError):
            _ = read_branch_mapping(REPO, logger=mock_logger)

    def test_legacy_duplicate_names_are_corruption(
        self, fs: FakeFilesystem, mock_logger: MagicMock
    ) -> None:
        entry = LEGACY_DOCUMENT["branches"][0]  # pyright: ignore[reportIndexIssue]
        fs.create_file(
            BRANCHES,
            contents=json.dumps({"version": "1.0.0", "branches": [entry, entry]}),
        )

        with pytest.raises(BranchMappingCorruptError, match="Duplicate branch name"):
            _ = read_branch_mapping(REPO, logger=mock_logger)
