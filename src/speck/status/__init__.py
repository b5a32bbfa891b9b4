"""Cross-repository branch status reporting."""

from speck.status._aggregate import (
    ROOT_REPO_NAME,
    AggregatedBranchStatus,
    AggregateStatusReporter,
    RepoBranchSummary,
    get_aggregated_branch_status,
)

__all__ = [
    "ROOT_REPO_NAME",
    "AggregateStatusReporter",
    "AggregatedBranchStatus",
    "RepoBranchSummary",
    "get_aggregated_branch_status",
]
