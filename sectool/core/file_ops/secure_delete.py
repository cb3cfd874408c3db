"""
Plaintext Working File Removal
==============================

Removes the unlocked vault working copy by overwriting it in place before
unlinking it.

Security Properties:
- Zero, one and random passes, each fsync'd
- Truncated to zero length before unlink
- Fails loudly if the file survives

Not a guarantee on copy-on-write filesystems or SSDs with wear
leveling; it only shortens the window in which plaintext is readable.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import BinaryIO, Callable, Final

from sectool.core.errors import SectoolError

DEFAULT_OVERWRITE_PASSES: Final[int] = 3
BLOCK_SIZE: Final[int] = 4096

_FILLS: Final[tuple[Callable[[int], bytes], ...]] = (
    lambda n: b"\x00" * n,
    lambda n: b"\xff" * n,
    secrets.token_bytes,
)


class SecureDeleteError(SectoolError):
    """Raised when a working file cannot be wiped and removed."""
    pass


def _overwrite(handle: BinaryIO, size: int, fill: Callable[[int], bytes]) -> None:
    handle.seek(0)
    remaining = size
    while remaining > 0:
        chunk = min(BLOCK_SIZE, remaining)
        handle.write(fill(chunk))
        remaining -= chunk
    handle.flush()
    os.fsync(handle.fileno())


def secure_delete(path: Path | str, passes: int = DEFAULT_OVERWRITE_PASSES) -> None:
    """
    Overwrite, truncate and unlink path. A missing file is ignored.

    Passes cycle through zeros, ones and random bytes.

    Raises:
        SecureDeleteError: If path is not a regular file or any step fails
    """
    path = Path(path)
    if not path.exists():
        return
    if not path.is_file():
        raise SecureDeleteError(f"Refusing to wipe non-file: {path}")

    try:
        size = path.stat().st_size
        with open(path, "r+b") as handle:
            for i in range(passes):
                _overwrite(handle, size, _FILLS[i % len(_FILLS)])
            handle.truncate(0)
        path.unlink()
    except OSError as e:
        raise SecureDeleteError(f"Could not wipe working file: {path}") from e

    if path.exists():
        raise SecureDeleteError(f"Working file survived deletion: {path}")
