"""Tagged results for callers that prefer values over exceptions.

Fatal conditions become `Err` carrying the `ErrorKind` of the exception
that caused them. Soft fallbacks stay successful and are listed in
`Ok.warnings`.

Example:
    >>> from speck.exceptions import ErrorKind
    >>> from speck.result import Err, try_detect_topology
    >>> match try_detect_topology():
    ...     case Err(kind=ErrorKind.SECURITY, message=message):
    ...         print(message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Literal, TypeVar

from speck.branches import read_branch_mapping
from speck.exceptions import ErrorKind, SpeckError
from speck.features import FeaturePathResolver
from speck.topology import RootResolver

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from speck.branches import BranchMapping
    from speck.features import FeaturePaths
    from speck.topology import RepoTopology

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful value and any soft-fallback warnings."""

    value: T
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> Literal[True]:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """A fatal error.

    Attributes:
        kind: Classification of the failure.
        message: The error message, including any remediation.
        error: The exception that was raised.
    """

    kind: ErrorKind
    message: str
    error: SpeckError

    @property
    def ok(self) -> Literal[False]:
        return False

    @classmethod
    def from_exception(cls, error: SpeckError) -> Err:
        return cls(kind=error.kind, message=str(error), error=error)


Result = Ok[T] | Err


def try_detect_topology(
    root_resolver: RootResolver | None = None,
) -> Result[RepoTopology]:
    """Detect topology, returning configuration failures as `Err`."""
    resolver = root_resolver if root_resolver is not None else RootResolver()
    try:
        return Ok(resolver.detect_topology())
    except SpeckError as e:
        return Err.from_exception(e)


def try_read_branch_mapping(
    repo_root: Path,
    *,
    logger: FilteringBoundLogger | None = None,
) -> Result[BranchMapping]:
    """Read a branch mapping, returning corruption as `Err`."""
    try:
        return Ok(read_branch_mapping(repo_root, logger=logger))
    except SpeckError as e:
        return Err.from_exception(e)


def try_resolve_feature_paths(
    resolver: FeaturePathResolver | None = None,
) -> Result[FeaturePaths]:
    """Resolve feature paths, carrying soft-fallback warnings on `Ok`."""
    path_resolver = resolver if resolver is not None else FeaturePathResolver()
    try:
        paths = path_resolver.resolve()
    except SpeckError as e:
        return Err.from_exception(e)
    return Ok(paths, warnings=paths.warnings)
