"""
Envelope-Encrypted Secret Cache
===============================

In-memory mapping from identifier to ciphertext token. Each entry is
encrypted under its own ephemeral key held by a KeyManager, so no value
sits in a long-lived container as plaintext.

Lifetime: one command invocation. Instances are never shared.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Set

from sectool.core.crypto.aes_gcm import Cipher
from sectool.core.crypto.key_manager import KeyManager
from sectool.core.errors import DecryptionError, KeyNotFound


class SecureKVStore:
    """
    Secret cache backed by a KeyManager and the AES-GCM token cipher.

    Usage:
        kv = SecureKVStore(KeyManager())
        kv.put("API_TOKEN", "abc123")
        kv.get("API_TOKEN")           # "abc123"
        kv.match_value("abc123")      # True

    Security Notes:
        - Plaintext only exists on the call stack of put/get
        - delete() drops the ciphertext and its backing key together

    Values are text: put() encodes as UTF-8 and get() decodes it, so
    binary secrets that are not valid UTF-8 raise MalformedInput on read.
    Store such secrets base64-encoded.
    """

    __slots__ = ("_store", "_keys", "_cipher", "_lock")

    def __init__(self, key_manager: Optional[KeyManager] = None) -> None:
        self._store: Dict[str, str] = {}
        self._keys = key_manager if key_manager is not None else KeyManager()
        self._cipher = Cipher()
        self._lock = threading.RLock()

    @property
    def key_manager(self) -> KeyManager:
        return self._keys

    def put(self, key: str, value: str) -> None:
        """Encrypt value under a freshly generated key named after key."""
        with self._lock:
            encryption_key = self._keys.generate_key(key)
            self._store[key] = self._cipher.encrypt(value, encryption_key)

    def get(self, key: str) -> str:
        """
        Decrypt and return the value stored under key.

        Raises:
            KeyNotFound: If there is no entry, or its backing key is gone
        """
        with self._lock:
            token = self._store.get(key)
            if token is None:
                raise KeyNotFound(key)
            encryption_key = self._keys.get_key(key)
            return self._cipher.decrypt_text(token, encryption_key)

    def delete(self, key: str) -> None:
        """Remove the entry and its backing key. No error if absent."""
        with self._lock:
            self._store.pop(key, None)
            self._keys.delete_key(key)

    def clear(self) -> None:
        """Remove every entry and every backing key."""
        with self._lock:
            for key in list(self._store):
                self._keys.delete_key(key)
            self._store.clear()

    def list_keys(self) -> Set[str]:
        with self._lock:
            return set(self._store)

    def match_value(self, target: str) -> bool:
        """
        Return True if any stored value equals target.

        Entries are decrypted one at a time; entries whose key is
        missing or whose token fails to decrypt never match.
        """
        wanted = target.encode("utf-8")
        with self._lock:
            for key, token in self._store.items():
                try:
                    plaintext = self._cipher.decrypt(token, self._keys.get_key(key))
                except (KeyNotFound, DecryptionError):
                    continue
                if self._cipher.constant_time_compare(plaintext, wanted):
                    return True
        return False

    def reveal_values(self) -> List[str]:
        """
        Decrypt every stored value.

        Only meant for building a redaction matcher right before a
        child process starts; the result must not be kept around.
        """
        with self._lock:
            return [self.get(key) for key in self._store]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __repr__(self) -> str:
        return f"SecureKVStore(entries={len(self)})"
