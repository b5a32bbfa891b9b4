# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Repository topology models."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Self

SPECS_DIR_NAME = "specs"


class RepoMode(StrEnum):
    """Operating mode of the current checkout."""

    SINGLE_REPO = "single-repo"
    MULTI_REPO = "multi-repo"


class RepoContext(StrEnum):
    """Where the current checkout sits in a multi-repo constellation."""

    SINGLE = "single"
    ROOT = "root"
    CHILD = "child"


@dataclass(frozen=True, slots=True)
class RepoTopology:
    """Resolved layout of the current checkout.

    Attributes:
        mode: Single-repo or multi-repo.
        speck_root: Shared root holding `specs/`; equals `repo_root` in
            single-repo mode.
        repo_root: Main repository root, resolved through linked worktrees.
        specs_dir: `speck_root/specs`.
        worktree_root: Top level of the checkout that was actually entered.
            Differs from `repo_root` only inside a linked worktree.
    """

    mode: RepoMode
    speck_root: Path
    repo_root: Path
    specs_dir: Path
    worktree_root: Path

    @classmethod
    def single(cls, repo_root: Path, *, worktree_root: Path | None = None) -> Self:
        """Build a single-repo topology rooted at `repo_root`."""
        return cls(
            mode=RepoMode.SINGLE_REPO,
            speck_root=repo_root,
            repo_root=repo_root,
            specs_dir=repo_root / SPECS_DIR_NAME,
            worktree_root=worktree_root if worktree_root is not None else repo_root,
        )

    @classmethod
    def multi(
        cls,
        speck_root: Path,
        repo_root: Path,
        *,
        worktree_root: Path | None = None,
    ) -> Self:
        """Build a multi-repo topology sharing specs under `speck_root`."""
        return cls(
            mode=RepoMode.MULTI_REPO,
            speck_root=speck_root,
            repo_root=repo_root,
            specs_dir=speck_root / SPECS_DIR_NAME,
            worktree_root=worktree_root if worktree_root is not None else repo_root,
        )

    @property
    def is_multi_repo_child(self) -> bool:
        return self.mode is RepoMode.MULTI_REPO and self.repo_root != self.speck_root

    @property
    def context(self) -> RepoContext:
        if self.mode is RepoMode.SINGLE_REPO:
            return RepoContext.SINGLE
        if self.is_multi_repo_child:
            return RepoContext.CHILD
        return RepoContext.ROOT
