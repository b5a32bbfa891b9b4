"""Feature path resolution.

Combines topology, the branch mapping and the `NNN-` naming convention to
find the active feature's spec directory and artifact paths.

Example:
    >>> from speck.features import FeaturePathResolver
    >>> paths = FeaturePathResolver().resolve()
    >>> paths.as_env()["FEATURE_SPEC"]
    '/work/app/specs/004-fix-auth/spec.md'
"""

from speck.features._branch import (
    DEFAULT_BRANCH,
    check_feature_branch,
    detect_current_branch,
    latest_feature_dir,
)
from speck.features._context import MultiRepoContext, get_multi_repo_context
from speck.features._contracts import sync_shared_contracts
from speck.features._paths import FeaturePaths, build_feature_paths
from speck.features._resolver import (
    FeatureDirLookup,
    FeatureDirSource,
    FeaturePathResolver,
    find_feature_dir,
    resolve_feature_paths,
)

__all__ = [
    "DEFAULT_BRANCH",
    "FeatureDirLookup",
    "FeatureDirSource",
    "FeaturePathResolver",
    "FeaturePaths",
    "MultiRepoContext",
    "build_feature_paths",
    "check_feature_branch",
    "detect_current_branch",
    "find_feature_dir",
    "get_multi_repo_context",
    "latest_feature_dir",
    "resolve_feature_paths",
    "sync_shared_contracts",
]
