# pyright: reportAny=false
"""JSON file I/O for Speck state files.

Writes go through a temporary file in the destination directory followed by
an atomic rename, so readers never observe a partially written document.
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import Any

import orjson

from speck.exceptions import SpeckIOError

__all__ = [
    "atomic_write",
    "read_json_bytes",
    "write_json_atomic",
]


def _file_mode(path: Path) -> int:
    """Return the permission bits a freshly written `path` should carry.

    An existing file keeps its mode; a new one gets the umask default that
    `open()` would have applied.
    """
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        _ = os.umask(umask)
        return 0o666 & ~umask


def atomic_write(path: Path, content: bytes) -> None:
    """Write content to a file atomically.

    Writes to a temporary file in the same directory, then renames to the
    target path. The rename is atomic for same-filesystem paths. The
    temporary file is removed whenever the write or the rename fails.

    Args:
        path: Destination file path.
        content: Content to write.

    Raises:
        SpeckIOError: If the write operation fails.
    """
    _ = path.parent.mkdir(parents=True, exist_ok=True)

    temp_path: Path | None = None
    try:
        mode = _file_mode(path)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            _ = f.write(content)

        # NamedTemporaryFile creates 0600 files
        temp_path.chmod(mode)
        _ = temp_path.replace(path)

    except OSError as e:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        msg = f"Failed to write file: {e}"
        raise SpeckIOError(msg, path=path, operation="write", cause=e) from e


def read_json_bytes(path: Path) -> bytes:
    """Read the raw bytes of a JSON file.

    Args:
        path: Path to the file.

    Returns:
        The file content.

    Raises:
        FileNotFoundError: If the file does not exist.
        SpeckIOError: If the file exists but cannot be read.
    """
    try:
        return path.read_bytes()
    except FileNotFoundError:
        raise
    except OSError as e:
        msg = f"Failed to read file: {e}"
        raise SpeckIOError(msg, path=path, operation="read", cause=e) from e


def write_json_atomic(
    path: Path,
    data: dict[str, Any],  # pyright: ignore[reportExplicitAny]
) -> None:
    """Serialize a dictionary as indented JSON and write it atomically.

    Key order is preserved so documents stay diff-friendly under version
    control.

    Args:
        path: Destination file path.
        data: Dictionary to serialize.

    Raises:
        SpeckIOError: If serialization or the write fails.
    """
    try:
        content = orjson.dumps(data, option=orjson.OPT_INDENT_2)
    except TypeError as e:
        msg = f"Failed to serialize JSON: {e}"
        raise SpeckIOError(msg, path=path, operation="write", cause=e) from e

    atomic_write(path, content + b"\n")
