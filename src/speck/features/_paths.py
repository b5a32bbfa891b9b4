# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Feature artifact paths."""

from dataclasses import dataclass, field
from pathlib import Path

from speck.topology import RepoMode


@dataclass(frozen=True, slots=True)
class FeaturePaths:
    """Canonical artifact locations for the active feature.

    The spec, checklists, linked-repos list and contracts are shared and
    live under `feature_dir` (below the speck root). Plan, tasks, research,
    data model and quickstart are per-repository and live under the local
    `repo_root/specs/<feature>`. The two only differ in multi-repo mode.

    Attributes:
        warnings: Soft-fallback conditions hit while resolving, such as an
            ambiguous numeric prefix.
    """

    mode: RepoMode
    speck_root: Path
    specs_dir: Path
    repo_root: Path
    current_branch: str
    has_git: bool
    feature_dir: Path
    feature_spec: Path
    impl_plan: Path
    tasks: Path
    research: Path
    data_model: Path
    quickstart: Path
    contracts_dir: Path
    checklists_dir: Path
    linked_repos: Path
    warnings: tuple[str, ...] = field(default=())

    @property
    def feature_name(self) -> str:
        return self.feature_dir.name

    @property
    def local_feature_dir(self) -> Path:
        return self.impl_plan.parent

    def as_env(self) -> dict[str, str]:
        """Render as the upper-case variables handed to shell callers."""
        return {
            "MODE": str(self.mode),
            "SPECK_ROOT": str(self.speck_root),
            "SPECS_DIR": str(self.specs_dir),
            "REPO_ROOT": str(self.repo_root),
            "CURRENT_BRANCH": self.current_branch,
            "HAS_GIT": "true" if self.has_git else "false",
            "FEATURE_DIR": str(self.feature_dir),
            "FEATURE_SPEC": str(self.feature_spec),
            "IMPL_PLAN": str(self.impl_plan),
            "TASKS": str(self.tasks),
            "RESEARCH": str(self.research),
            "DATA_MODEL": str(self.data_model),
            "QUICKSTART": str(self.quickstart),
            "CONTRACTS_DIR": str(self.contracts_dir),
            "CHECKLISTS_DIR": str(self.checklists_dir),
            "LINKED_REPOS": str(self.linked_repos),
        }


def build_feature_paths(
    *,
    mode: RepoMode,
    speck_root: Path,
    specs_dir: Path,
    repo_root: Path,
    current_branch: str,
    has_git: bool,
    feature_dir: Path,
    warnings: tuple[str, ...] = (),
) -> FeaturePaths:
    """Derive every artifact path from a resolved feature directory."""
    local_dir = repo_root / "specs" / feature_dir.name
    return FeaturePaths(
        mode=mode,
        speck_root=speck_root,
        specs_dir=specs_dir,
        repo_root=repo_root,
        current_branch=current_branch,
        has_git=has_git,
        feature_dir=feature_dir,
        feature_spec=feature_dir / "spec.md",
        impl_plan=local_dir / "plan.md",
        tasks=local_dir / "tasks.md",
        research=local_dir / "research.md",
        data_model=local_dir / "data-model.md",
        quickstart=local_dir / "quickstart.md",
        contracts_dir=feature_dir / "contracts",
        checklists_dir=feature_dir / "checklists",
        linked_repos=feature_dir / "linked-repos.md",
        warnings=warnings,
    )
