"""
In-Memory Vault
===============

VaultStore kept in a plain dictionary. Nothing is persisted; backups are
copies of the mapping kept on the instance. Intended for tests and for
embedding the composer where secrets come from elsewhere.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from sectool.core.errors import SecretNotFound
from sectool.core.vault.base import SecretSink, VaultStore, backup_name
from sectool.utils.validators import validate_secret_key


class MemoryVaultStore(VaultStore):
    """Dictionary-backed VaultStore."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()
        self._backup = False
        self.backups: List[Tuple[str, Dict[str, str]]] = []
        for key, value in (initial or {}).items():
            self.set(key, value)

    def list_keys(self) -> Set[str]:
        with self._lock:
            return set(self._data)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def get(self, key: str) -> str:
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise SecretNotFound(key) from None

    def get_many(self, keys: Iterable[str], sink: SecretSink) -> None:
        with self._lock:
            for key in set(keys):
                if key in self._data:
                    sink.put(key, self._data[key])

    def set(self, key: str, value: str) -> None:
        validate_secret_key(key)
        with self._lock:
            self._snapshot()
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                raise SecretNotFound(key)
            self._snapshot()
            del self._data[key]

    def enable_backup(self, value: bool) -> None:
        self._backup = bool(value)

    def _snapshot(self) -> None:
        if self._backup:
            self.backups.append((backup_name("memory"), dict(self._data)))

    def __repr__(self) -> str:
        return f"MemoryVaultStore(keys={len(self.list_keys())})"
