"""
Vault Store Contract
====================

Defines the at-rest secret storage interface every backend implements,
and the shared machinery for backends that keep the whole key space as a
single encrypted blob.

Contract:
    - get_many() writes into a caller-supplied sink; plaintext is never
      returned as a collection
    - keys missing from the vault are silently omitted by get_many()
    - set() is an idempotent upsert, delete() fails on a missing key
    - with backups enabled, every mutation snapshots the current blob first
    - lock()/unlock() are optional and no-ops by default
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, Optional, Protocol, Set, runtime_checkable

from sectool.core.crypto.aes_gcm import Cipher
from sectool.core.errors import SecretNotFound
from sectool.core.vault.records import parse_records, serialize_records
from sectool.security.constants import BACKUP_TIMESTAMP_FORMAT, VAULT_KEY_ENTRY_ID
from sectool.utils.validators import validate_secret_key


@runtime_checkable
class SecretSink(Protocol):
    """Anything that can receive a resolved secret."""

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError


def backup_name(name: str, now: Optional[datetime] = None) -> str:
    """Return '<name>_<YYYYMMDDHHMMSS>' for the given (or current) time."""
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return f"{name}_{stamp}"


class VaultStore(ABC):
    """Abstract at-rest secret store."""

    @abstractmethod
    def list_keys(self) -> Set[str]:
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_many(self, keys: Iterable[str], sink: SecretSink) -> None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def enable_backup(self, value: bool) -> None:
        raise NotImplementedError

    def has(self, key: str) -> bool:
        return key in self.list_keys()

    def initialize(self) -> None:
        """Create an empty vault if none exists."""

    def lock(self) -> None:
        """Re-encrypt the plaintext working copy, if the backend has one."""

    def unlock(self) -> None:
        """Materialize a plaintext working copy, if the backend has one."""

    def register_sensitive(self, sink: SecretSink) -> None:
        """Store backend credential material into sink so it gets redacted."""


class EncryptedBlobVaultStore(VaultStore):
    """
    Base for backends that persist the whole record set as one token.

    Every read decrypts the whole blob and every write re-encrypts and
    replaces it, so cost is O(vault size) per operation. Subclasses only
    move opaque blobs around.
    """

    _SENSITIVE_ID = VAULT_KEY_ENTRY_ID

    def __init__(self, key: str | bytes) -> None:
        self._key = key.encode("utf-8") if isinstance(key, str) else bytes(key)
        self._cipher = Cipher()
        self._backup = False
        self._lock = threading.RLock()
        self._log = logging.getLogger("sectool.vault")

    # Blob transport

    @abstractmethod
    def _read_blob(self) -> Optional[bytes]:
        """Return the stored token, or None when there is no vault yet."""
        raise NotImplementedError

    @abstractmethod
    def _write_blob(self, blob: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def _backup_blob(self) -> Optional[str]:
        """Copy the current blob to a timestamped name; return that name."""
        raise NotImplementedError

    # Record set

    def _load(self) -> Dict[str, str]:
        blob = self._read_blob()
        if blob is None or not blob.strip():
            return {}
        return parse_records(self._cipher.decrypt_text(blob, self._key))

    def _store(self, records: Dict[str, str]) -> None:
        token = self._cipher.encrypt(serialize_records(records), self._key)
        if self._backup:
            name = self._backup_blob()
            if name:
                self._log.info(f"Vault backed up to {name}")
        self._write_blob(token.encode("ascii"))

    # VaultStore

    def list_keys(self) -> Set[str]:
        with self._lock:
            return set(self._load())

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._load()

    def get(self, key: str) -> str:
        with self._lock:
            records = self._load()
        if key not in records:
            raise SecretNotFound(key)
        return records[key]

    def get_many(self, keys: Iterable[str], sink: SecretSink) -> None:
        wanted = set(keys)
        with self._lock:
            records = self._load()
        found = 0
        for key, value in records.items():
            if key in wanted:
                sink.put(key, value)
                found += 1
        self._log.debug(f"Resolved {found} of {len(wanted)} requested key(s)")

    def set(self, key: str, value: str) -> None:
        validate_secret_key(key)
        with self._lock:
            records = self._load()
            records[key] = value
            self._store(records)
        self._log.info(f"Stored key {key!r}")

    def delete(self, key: str) -> None:
        with self._lock:
            records = self._load()
            if key not in records:
                raise SecretNotFound(key)
            del records[key]
            self._store(records)
        self._log.info(f"Deleted key {key!r}")

    def enable_backup(self, value: bool) -> None:
        self._backup = bool(value)

    def register_sensitive(self, sink: SecretSink) -> None:
        sink.put(self._SENSITIVE_ID, self._key.decode("utf-8", errors="replace"))
