"""
Environment Composition
=======================

Turns an env-file into the final list of 'name=value' strings handed to a
child process.

Flow:
1. Parse lines into (name, raw value, line number); fail on lines without '='
2. Collect every $IDENTIFIER referenced anywhere in the file
3. Resolve all of them in ONE vault.get_many() call into a SecureKVStore
4. Store literal values in the same SecureKVStore so they get redacted too
5. Substitute placeholders; any unresolved one aborts the whole composition

Security Notes:
- Resolved values only live in the SecureKVStore until substitution
- The composed list is plaintext by design: it is the child's environment
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Final, List

from sectool.core.crypto.kv_store import SecureKVStore
from sectool.core.errors import (
    ConfigError,
    KeyNotFound,
    MalformedEnvLine,
    UnresolvedPlaceholder,
)
from sectool.core.vault.base import VaultStore
from sectool.security.constants import (
    COMMENT_MARKER,
    LITERAL_ENTRY_PREFIX,
    PLACEHOLDER_PATTERN,
)

_PLACEHOLDER: Final[re.Pattern[str]] = re.compile(PLACEHOLDER_PATTERN)
_SUBSTITUTION: Final[re.Pattern[str]] = re.compile(r"\$([a-zA-Z_][a-zA-Z0-9_]*)")

_log = logging.getLogger("sectool.compose")


@dataclass(frozen=True, slots=True)
class EnvironmentLine:
    """One 'name=value' line of an env-file."""

    name: str
    raw_value: str
    lineno: int

    def __repr__(self) -> str:
        return f"EnvironmentLine(name={self.name!r}, lineno={self.lineno})"


def parse_env_content(content: str) -> List[EnvironmentLine]:
    """
    Parse env-file text.

    Blank lines and lines starting with '#' are skipped. Each other line
    is split on its first '='.

    Raises:
        MalformedEnvLine: For the first line without '=' or with an
            empty name (1-based number)
    """
    lines: List[EnvironmentLine] = []
    for lineno, line in enumerate(content.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip() or line.startswith(COMMENT_MARKER):
            continue
        name, sep, raw_value = line.partition("=")
        if not sep or not name:
            raise MalformedEnvLine(lineno, line)
        lines.append(EnvironmentLine(name=name, raw_value=raw_value, lineno=lineno))
    return lines


def extract_placeholders(value: str) -> List[str]:
    """Return the identifiers referenced as $IDENTIFIER in value, in order."""
    return _PLACEHOLDER.findall(value)


def literal_id(value: str) -> str:
    """Synthetic SecureKVStore id for a placeholder-free value."""
    return LITERAL_ENTRY_PREFIX + hashlib.sha256(value.encode("utf-8")).hexdigest()[:24]


class _ResolvedSink:
    """Forward vault results into the SecureKVStore, remembering their ids."""

    __slots__ = ("_kv", "ids")

    def __init__(self, kv_store: SecureKVStore) -> None:
        self._kv = kv_store
        self.ids: set[str] = set()

    def put(self, key: str, value: str) -> None:
        self._kv.put(key, value)
        self.ids.add(key)


class EnvironmentComposer:
    """
    Resolve and substitute env-file placeholders against a vault.

    Usage:
        kv = SecureKVStore(KeyManager())
        composer = EnvironmentComposer(vault, kv)
        environment = composer.compose_file("sectool.env")
        # kv now holds every value the executor must redact
    """

    __slots__ = ("_vault", "_kv", "_resolved")

    def __init__(self, vault: VaultStore, kv_store: SecureKVStore) -> None:
        self._vault = vault
        self._kv = kv_store
        self._resolved: set[str] = set()

    @property
    def kv_store(self) -> SecureKVStore:
        return self._kv

    def resolve(self, lines: List[EnvironmentLine]) -> None:
        """
        Fetch every referenced identifier in one batch into the SecureKVStore.

        Identifiers the vault does not know are left unresolved here;
        compose() reports them. Only ids the vault itself returned are
        substitutable, never other entries already in the store.
        """
        identifiers: set[str] = set()
        for line in lines:
            found = extract_placeholders(line.raw_value)
            if found:
                identifiers.update(found)
            elif line.raw_value:
                self._kv.put(literal_id(line.raw_value), line.raw_value)

        sink = _ResolvedSink(self._kv)
        self._vault.get_many(sorted(identifiers), sink)
        self._resolved = sink.ids & identifiers
        _log.debug(
            f"Requested {len(identifiers)} placeholder(s) from {len(lines)} line(s)"
        )

    def compose(self, lines: List[EnvironmentLine]) -> List[str]:
        """
        Substitute placeholders and return ordered 'name=value' strings.

        Raises:
            UnresolvedPlaceholder: For the first identifier the vault did
                not resolve; nothing partial is returned
        """
        composed: List[str] = []
        for line in lines:
            composed.append(f"{line.name}={self._substitute(line)}")
        return composed

    def _substitute(self, line: EnvironmentLine) -> str:
        def replace(match: re.Match[str]) -> str:
            identifier = match.group(1)
            if identifier not in self._resolved:
                raise UnresolvedPlaceholder(identifier, line.lineno)
            try:
                return self._kv.get(identifier)
            except KeyNotFound:
                raise UnresolvedPlaceholder(identifier, line.lineno) from None

        return _SUBSTITUTION.sub(replace, line.raw_value)

    def compose_text(self, content: str) -> List[str]:
        """Parse, resolve and compose env-file text."""
        lines = parse_env_content(content)
        self.resolve(lines)
        return self.compose(lines)

    def compose_file(self, path: Path | str) -> List[str]:
        """
        Parse, resolve and compose an env-file on disk.

        Raises:
            ConfigError: If the file cannot be read as UTF-8
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigError(f"Env file not found: {path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Error reading env file: {path}") from e
        return self.compose_text(content)
