"""File operation utilities for metricview."""

import contextlib
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any


def datasync(fd: int) -> None:
    """Sync file data to disk.

    Uses fdatasync on Linux, fsync on macOS/other platforms.
    """
    if hasattr(os, "fdatasync") and platform.system() != "Darwin":
        os.fdatasync(fd)
    else:
        os.fsync(fd)


def atomic_write_text(path: str | Path, text: str, *, suffix: str = ".tmp", mode: int = 0o600) -> Path:
    """Atomically write text to a file.

    The text goes to a temporary file in the target directory which is then
    renamed over the target, so readers never observe a partial file.

    Args:
        path: Target file path
        text: Content to write (UTF-8)
        suffix: Suffix for the temporary file
        mode: Permission bits applied before the rename

    Returns:
        Path: The target path
    """
    target_path = Path(path)
    target_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_fd: int | None = None
    tmp_path: Path | None = None
    try:
        tmp_fd, tmp_name = tempfile.mkstemp(suffix=suffix, prefix=".tmp_", dir=str(target_path.parent))
        tmp_path = Path(tmp_name)

        with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as f:
            tmp_fd = None  # fd is now owned by the file object
            f.write(text)
            f.flush()
            datasync(f.fileno())

        os.chmod(tmp_path, mode)
        os.replace(tmp_path, target_path)
        tmp_path = None
    finally:
        if tmp_fd is not None:
            os.close(tmp_fd)
        if tmp_path is not None and tmp_path.exists():
            with contextlib.suppress(OSError):
                tmp_path.unlink()

    return target_path


def atomic_write_json(path: str | Path, data: dict[str, Any]) -> None:
    """Atomically write a dictionary as pretty-printed JSON (owner read/write only)."""
    atomic_write_text(path, json.dumps(data, ensure_ascii=False, indent=2), suffix=".json")
