"""Shared test fixtures for Speck tests."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from dulwich.repo import Repo

_SPECK_ENV_VARS = (
    "SPECIFY_FEATURE",
    "SPECK_DEBUG",
    "SPECK_LOG_LEVEL",
    "SPECK_LOG_FORMAT",
    "SPECK_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_speck_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's SPECIFY_FEATURE and SPECK_* settings out of tests."""
    for name in _SPECK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock()


@dataclass(frozen=True, slots=True)
class Constellation:
    """Paths for a speck root with one linked child repository."""

    speck_root: Path
    child: Path
    home: Path


def init_repo(path: Path, branch: str = "main") -> Path:
    """Create a git repository at `path` with HEAD on `branch`."""
    path.mkdir(parents=True, exist_ok=True)
    repo = Repo.init(str(path))
    try:
        repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/" + branch.encode())
    finally:
        repo.close()
    return path.resolve()


def link_child(speck_root: Path, name: str, target: Path) -> Path:
    """Create `speck_root/.speck-link-<name>` pointing at `target`."""
    link = speck_root / f".speck-link-{name}"
    link.symlink_to(target, target_is_directory=True)
    return link


def link_speck_root(repo_root: Path, target: Path) -> Path:
    """Create `repo_root/.speck/root` pointing at `target`."""
    speck_dir = repo_root / ".speck"
    speck_dir.mkdir(parents=True, exist_ok=True)
    link = speck_dir / "root"
    link.symlink_to(target, target_is_directory=True)
    return link


@pytest.fixture
def make_repo() -> Callable[..., Path]:
    """Return a function creating a git repository with HEAD on a branch."""
    return init_repo


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a standalone git repository.

    Structure:
        tmp_path/
            repo/
                .git/
    """
    return init_repo(tmp_path / "repo")


@pytest.fixture
def constellation(tmp_path: Path) -> Constellation:
    """Create a speck root with a linked child repository.

    Structure:
        tmp_path/
            home/
                root/                          # git repo, shared specs
                    .git/
                    specs/
                    .speck-link-api -> ../api
                api/                           # git repo
                    .git/
                    .speck/root -> ../root
    """
    home = (tmp_path / "home").resolve()
    speck_root = init_repo(home / "root")
    (speck_root / "specs").mkdir()

    child = init_repo(home / "api")
    _ = link_child(speck_root, "api", child)
    _ = link_speck_root(child, speck_root)

    return Constellation(speck_root=speck_root, child=child, home=home)
