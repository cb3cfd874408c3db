"""
Error Taxonomy
==============

Every failure the engine reports derives from SectoolError, so callers can
abort an operation on one except clause before any child process exists.

Security Notice:
- Messages name keys, identifiers and line numbers only
- Secret values never appear in an exception message
"""

from __future__ import annotations

from typing import Optional


class SectoolError(Exception):
    """Base class for all sectool failures."""
    pass


class ConfigError(SectoolError):
    """Raised when configuration cannot be read or is invalid."""
    pass


class VaultError(SectoolError):
    """Base class for vault backend failures."""
    pass


class VaultUnavailable(VaultError):
    """Raised when a vault backend cannot be read or written."""
    pass


class SecretNotFound(VaultError, LookupError):
    """Raised when a vault does not contain the requested key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Key not found in vault: {key}")
        self.key = key


class KeyNotFound(SectoolError, LookupError):
    """Raised when an in-memory key or entry is missing."""

    def __init__(self, key_id: str) -> None:
        super().__init__(f"Key not found: {key_id}")
        self.key_id = key_id


class DecryptionError(SectoolError):
    """
    Raised when decryption fails.

    Deliberately generic; the subclasses only separate
    corrupted input from a failed authentication check.
    """
    pass


class AuthenticationFailed(DecryptionError):
    """Raised on tag mismatch (wrong key or tampered data)."""
    pass


class MalformedInput(DecryptionError):
    """Raised when a token cannot be decoded or is truncated."""
    pass


class CompositionError(SectoolError):
    """Base class for env-file composition failures."""
    pass


class MalformedEnvLine(CompositionError):
    """Raised when an env-file line has no '=' separator."""

    def __init__(self, lineno: int, line: str = "") -> None:
        # Only the name part is echoed, the rest may be a secret
        shown = line.split("=", 1)[0][:40]
        super().__init__(f"Invalid line {lineno}: {shown!r}")
        self.lineno = lineno
        self.line = line


class UnresolvedPlaceholder(CompositionError):
    """Raised when a placeholder identifier was not resolved by the vault."""

    def __init__(self, identifier: str, lineno: int) -> None:
        super().__init__(f"Unresolved placeholder ${identifier} on line {lineno}")
        self.identifier = identifier
        self.lineno = lineno


class ExecutionError(SectoolError):
    """Base class for child process failures."""
    pass


class ProcessLaunchFailed(ExecutionError):
    """Raised when the child process cannot be started."""

    def __init__(self, command: str, reason: Optional[str] = None) -> None:
        message = f"Error starting command: {command}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.command = command


class ChildNonZeroExit(ExecutionError):
    """Raised by checked runs when the child exits with a non-zero code."""

    def __init__(self, code: int) -> None:
        super().__init__(f"Command exited with status {code}")
        self.code = code
