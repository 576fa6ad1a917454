"""File system utilities: atomic writes, appends, directories, permissions."""

from __future__ import annotations

import contextlib
import logging
import os
import platform
import stat
import tempfile
from pathlib import Path

log = logging.getLogger(__name__)

FILE_MODE = 0o600
DIR_MODE = 0o700

# Mode for new files the operator owns (the watched input file)
SHARED_FILE_MODE = 0o644

_IS_WINDOWS = platform.system() == "Windows"


def ensure_dir(path: Path) -> Path:
    """Create directory with secure permissions if it doesn't exist.

    Existing directories keep their mode.
    """
    if path.is_dir():
        return path
    path.mkdir(parents=True, exist_ok=True)
    if not _IS_WINDOWS:
        path.chmod(DIR_MODE)
    return path


def ensure_file_permissions(path: Path) -> None:
    """Set file permissions to owner-only read/write."""
    if not _IS_WINDOWS and path.exists():
        path.chmod(FILE_MODE)


def atomic_write(path: Path, content: str, encoding: str = "utf-8", secure: bool = True) -> None:
    """Write content to file atomically via temp file + rename.

    Readers polling the file never observe a half-written sentinel. With
    ``secure=False`` the file keeps its current mode (0644 when new) and a
    missing parent is created with default permissions.
    """
    if secure:
        ensure_dir(path.parent)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)

    mode = None
    if not secure and not _IS_WINDOWS:
        try:
            mode = stat.S_IMODE(path.stat().st_mode)
        except FileNotFoundError:
            mode = SHARED_FILE_MODE

    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".tmp_",
        suffix=path.suffix,
    )
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise

    if secure:
        ensure_file_permissions(path)


def append_text(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Append content to the end of a file, creating it if absent.

    Write-only: existing bytes are never read or rewritten.
    """
    ensure_dir(path.parent)
    created = not path.exists()
    with open(path, "a", encoding=encoding, newline="") as f:
        f.write(content)
        f.flush()
        os.fsync(f.fileno())
    if created:
        ensure_file_permissions(path)


def touch_empty(path: Path) -> bool:
    """Create an empty file if it doesn't exist. Returns True if created."""
    if path.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")
    return True


def mtime_ns(path: Path) -> int | None:
    """Modification time in nanoseconds, or None if the file is missing."""
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None
