"""
Streaming Secret Redaction
==========================

Replaces every literal occurrence of a known secret in a byte stream with
a fixed placeholder.

The stream is scanned as a whole, not line by line: a secret containing a
line break, or one split across two reads, is still caught. To do that the
redactor holds back at most (longest secret - 1) bytes that could still be
the start of a match.

Overlapping secrets are resolved longest-first: at any position the longest
secret that matches wins, and matching resumes after it.
"""

from __future__ import annotations

import re
from typing import Final, Iterable, List, Optional

from sectool.security.constants import REDACTION_PLACEHOLDER

DEFAULT_PLACEHOLDER: Final[bytes] = REDACTION_PLACEHOLDER.encode("ascii")


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


class StreamRedactor:
    """
    Incremental redactor for one output stream.

    Usage:
        redactor = StreamRedactor(["hunter2"])
        out = redactor.feed(b"password: hun")    # b"password: "
        out += redactor.feed(b"ter2\\n")         # b"[HIDDEN]\\n"
        out += redactor.flush()

    Not thread-safe: use one instance per stream.
    """

    __slots__ = ("_pattern", "_count", "_max_len", "_placeholder", "_pending")

    def __init__(
        self,
        secrets: Iterable[str | bytes],
        placeholder: str | bytes = DEFAULT_PLACEHOLDER,
    ) -> None:
        unique = {_as_bytes(s) for s in secrets}
        unique.discard(b"")
        ordered: List[bytes] = sorted(unique, key=lambda s: (-len(s), s))

        self._pattern: Optional[re.Pattern[bytes]] = None
        if ordered:
            self._pattern = re.compile(b"|".join(re.escape(s) for s in ordered))
        self._count = len(ordered)
        self._max_len = len(ordered[0]) if ordered else 0
        self._placeholder = _as_bytes(placeholder)
        self._pending = b""

    @property
    def secret_count(self) -> int:
        return self._count

    def feed(self, chunk: bytes) -> bytes:
        """Consume a chunk and return the output that is now safe to emit."""
        if self._pattern is None:
            return chunk
        self._pending += chunk
        # A match starting before this offset has all the bytes it needs
        safe = len(self._pending) - (self._max_len - 1)
        return self._drain(safe)

    def flush(self) -> bytes:
        """Emit everything still held back (end of stream)."""
        if self._pattern is None:
            return b""
        return self._drain(len(self._pending))

    def redact(self, data: bytes) -> bytes:
        """Redact a complete buffer in one call."""
        return self.feed(data) + self.flush()

    def _drain(self, safe: int) -> bytes:
        if safe <= 0:
            return b""
        buffer = self._pending
        out = []
        pos = 0
        for match in self._pattern.finditer(buffer):
            if match.start() >= safe:
                break
            out.append(buffer[pos:match.start()])
            out.append(self._placeholder)
            pos = match.end()
        keep_from = max(pos, safe)
        out.append(buffer[pos:keep_from])
        self._pending = buffer[keep_from:]
        return b"".join(out)


def redact_text(text: str, secrets: Iterable[str], placeholder: str = REDACTION_PLACEHOLDER) -> str:
    """Replace every known secret in text with placeholder."""
    redactor = StreamRedactor(secrets, placeholder)
    return redactor.redact(text.encode("utf-8")).decode("utf-8")
