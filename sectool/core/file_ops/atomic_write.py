"""
Atomic File Replacement
=======================

Whole-file writes that readers can never observe half-done: data goes to
a temporary sibling which is fsync'd and renamed over the target.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from sectool.security.constants import VAULT_FILE_MODE


def atomic_write_bytes(
    path: Path | str,
    data: bytes,
    mode: int = VAULT_FILE_MODE,
) -> None:
    """
    Replace path with data in one rename.

    On failure the previous file is left untouched and the
    temporary file is removed.
    """
    path = Path(path)
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=directory)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
