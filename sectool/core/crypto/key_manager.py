"""
Ephemeral Key Manager
=====================

Holds per-identifier AES-256 keys in process memory only.

Security Properties:
    - Keys come from the OS CSPRNG
    - Keys are never serialized or written anywhere
    - Replaced and deleted keys are zeroized in place
"""

from __future__ import annotations

import logging
import secrets
import threading
from typing import Dict

from sectool.core.errors import KeyNotFound
from sectool.core.memory.zeroization import secure_zero
from sectool.security.constants import KEY_LENGTH_BYTES


class KeyManager:
    """
    In-memory store of symmetric keys by identifier.

    Regenerating a key for an identifier silently invalidates every
    ciphertext produced under the previous key for that identifier.

    Usage:
        km = KeyManager()
        key = km.generate_key("DB_PASSWORD")
        assert km.get_key("DB_PASSWORD") == key
        km.delete_key("DB_PASSWORD")
    """

    __slots__ = ("_keys", "_lock", "_log")

    def __init__(self) -> None:
        self._keys: Dict[str, bytearray] = {}
        self._lock = threading.Lock()
        self._log = logging.getLogger("sectool.crypto")

    def generate_key(self, key_id: str) -> bytes:
        """
        Create and store a new random 256-bit key under key_id.

        Returns:
            A copy of the new key
        """
        key = bytearray(secrets.token_bytes(KEY_LENGTH_BYTES))
        with self._lock:
            previous = self._keys.get(key_id)
            self._keys[key_id] = key
        if previous is not None:
            secure_zero(previous)
        return bytes(key)

    def get_key(self, key_id: str) -> bytes:
        """
        Return the key stored under key_id.

        Raises:
            KeyNotFound: If no key exists for key_id
        """
        with self._lock:
            key = self._keys.get(key_id)
            if key is None:
                raise KeyNotFound(key_id)
            return bytes(key)

    def delete_key(self, key_id: str) -> None:
        """Remove and zeroize the key for key_id. No error if absent."""
        with self._lock:
            key = self._keys.pop(key_id, None)
        if key is not None:
            secure_zero(key)

    def clear(self) -> None:
        """Remove and zeroize every key."""
        with self._lock:
            keys = list(self._keys.values())
            self._keys.clear()
        for key in keys:
            secure_zero(key)
        self._log.debug(f"Cleared {len(keys)} ephemeral key(s)")

    def __contains__(self, key_id: object) -> bool:
        with self._lock:
            return key_id in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def __repr__(self) -> str:
        return f"KeyManager(keys={len(self)})"
