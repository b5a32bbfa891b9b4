"""Branch to spec mapping store.

Remembers which spec a branch implements when the branch name does not
follow the `NNN-slug` convention.

Example:
    >>> from speck.branches import read_branch_mapping, register_branch
    >>> mapping = register_branch(repo_root, "nprbst/fix-auth", "004-fix-auth")
    >>> mapping.spec_index["004-fix-auth"]
    ('nprbst/fix-auth',)
"""

from speck.branches._mapper import (
    BRANCHES_FILE,
    add_branch,
    branches_path,
    create_entry,
    empty_mapping,
    find_branch_entry,
    get_branches_for_spec,
    get_spec_for_branch,
    read_branch_mapping,
    register_branch,
    remove_branch,
    validate_branch_mapping,
    write_branch_mapping,
)
from speck.branches._migration import is_legacy_document, migrate_legacy_mapping
from speck.branches._models import (
    CURRENT_VERSION,
    BranchEntry,
    BranchMapping,
    LegacyBranchEntry,
    LegacyBranchMapping,
    rebuild_spec_index,
    utc_timestamp,
)

__all__ = [
    "BRANCHES_FILE",
    "CURRENT_VERSION",
    "BranchEntry",
    "BranchMapping",
    "LegacyBranchEntry",
    "LegacyBranchMapping",
    "add_branch",
    "branches_path",
    "create_entry",
    "empty_mapping",
    "find_branch_entry",
    "get_branches_for_spec",
    "get_spec_for_branch",
    "is_legacy_document",
    "migrate_legacy_mapping",
    "read_branch_mapping",
    "rebuild_spec_index",
    "register_branch",
    "remove_branch",
    "utc_timestamp",
    "validate_branch_mapping",
    "write_branch_mapping",
]
