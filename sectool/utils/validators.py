"""
Validation Utilities
====================

Input validation for vault keys.
"""

from __future__ import annotations

from typing import Final

_FORBIDDEN_KEY_CHARS: Final[frozenset[str]] = frozenset({"=", "\n", "\r", "\x00"})


class ValidationError(ValueError):
    """Raised when validation fails."""
    pass


def validate_secret_key(key: str, max_length: int = 256) -> str:
    """
    Validate a vault key.

    Keys are the left-hand side of a stored 'key=value' record, so they
    cannot contain the separator or a line break.

    Returns:
        The key unchanged

    Raises:
        ValidationError: If the key is empty, too long or contains
            a forbidden character
    """
    if not isinstance(key, str):
        raise ValidationError("key must be a string")

    if not key:
        raise ValidationError("key cannot be empty")

    if len(key) > max_length:
        raise ValidationError(f"key must be at most {max_length} characters")

    if any(ch in _FORBIDDEN_KEY_CHARS for ch in key):
        raise ValidationError("key contains invalid characters")

    return key
