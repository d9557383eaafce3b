"""Exclusive advisory locks on state files, held for the life of the process."""

from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import IO

from ghircbot.core.errors import StateFileError


def open_locked(path: Path) -> IO[str]:
    """Open (creating if needed) and lock path; a second instance is refused."""
    try:
        handle = open(path, "a+", encoding="utf-8")
    except OSError as exc:
        raise StateFileError(f"{path}: {exc.strerror}") from exc
    try:
        fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError as exc:
        handle.close()
        raise StateFileError(f"{path}: already in use") from exc
    handle.seek(0)
    return handle


def replace_locked(path: Path, content: str) -> IO[str]:
    """Atomically replace path with content and return a locked handle on it.

    The temporary file is locked before the rename, so the lock carries over
    to the new file; the caller closes the old handle afterwards.
    """
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}-")
    handle = os.fdopen(fd, "w+", encoding="utf-8")
    try:
        fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        handle.write(content)
        handle.flush()
        os.fsync(handle.fileno())
        os.replace(tmp, str(path))
    except BaseException:
        handle.close()
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    return handle
