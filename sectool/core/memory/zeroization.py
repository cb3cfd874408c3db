"""
Key Buffer Wiping
=================

Overwrites mutable buffers that held key material or plaintext, so the
bytes are gone once the KeyManager or a vault lock is done with them.

Security Properties:
- Wiping happens at a known point, not whenever the GC runs
- ZeroizeContext wipes on both normal and exceptional exit

WARNING:
- Immutable bytes objects cannot be wiped; only bytearray buffers are
- Best-effort only: the interpreter may have copied the data elsewhere
"""

from __future__ import annotations

import ctypes
from types import TracebackType
from typing import Optional, Tuple, Type


def secure_zero(buffer: bytearray | memoryview) -> None:
    """Overwrite every byte of buffer with zero, in place."""
    size = len(buffer)
    if not size:
        return

    if isinstance(buffer, bytearray):
        view = (ctypes.c_char * size).from_buffer(buffer)
        ctypes.memset(ctypes.addressof(view), 0, size)
        del view
    else:
        buffer[:] = bytes(size)


class ZeroizeContext:
    """
    Wipe a set of buffers when the block exits.

    Usage:
        plaintext = bytearray(path.read_bytes())
        with ZeroizeContext(plaintext):
            token = cipher.encrypt(plaintext, key)
    """

    __slots__ = ("_buffers",)

    def __init__(self, *buffers: bytearray) -> None:
        self._buffers: Tuple[bytearray, ...] = buffers

    def __enter__(self) -> Tuple[bytearray, ...]:
        return self._buffers

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        for buffer in self._buffers:
            secure_zero(buffer)
