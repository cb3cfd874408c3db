"""
Vault Record Set Format
=======================

Plaintext layout of a vault blob: one 'key=value' record per line.

Values are escaped so that multi-line secrets survive the line-based
layout:

    \\  ->  backslash
    \\n ->  line feed
    \\r ->  carriage return

Any other backslash sequence is kept verbatim, so blobs written without
escaping still read back unchanged. Lines without '=' are ignored.
"""

from __future__ import annotations

from typing import Dict, Final, Mapping

_ESCAPES: Final[Dict[str, str]] = {"\\": "\\", "n": "\n", "r": "\r"}


def escape_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r")


def unescape_value(raw: str) -> str:
    out = []
    i = 0
    length = len(raw)
    while i < length:
        ch = raw[i]
        if ch == "\\" and i + 1 < length and raw[i + 1] in _ESCAPES:
            out.append(_ESCAPES[raw[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def parse_records(text: str) -> Dict[str, str]:
    """
    Parse a record set into an ordered mapping.

    A key that appears twice keeps its first position and last value.
    """
    records: Dict[str, str] = {}
    for line in text.split("\n"):
        key, sep, raw = line.partition("=")
        if not sep:
            continue
        records[key] = unescape_value(raw)
    return records


def serialize_records(records: Mapping[str, str]) -> str:
    """Serialize a mapping into the newline-delimited record layout."""
    return "\n".join(f"{key}={escape_value(value)}" for key, value in records.items())
