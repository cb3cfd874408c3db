"""
Sectool Cryptographic Core
==========================

Authenticated encryption and the ephemeral in-memory secret cache.

Architecture:
    1. Cipher: AES-256-GCM tokens under hashed key material
    2. KeyManager: per-identifier random keys, memory only
    3. SecureKVStore: identifier -> ciphertext, one key per entry

Security Properties:
    - All encryption is authenticated (AEAD)
    - Keys never touch disk
    - Secure RNG for all random values
"""

from sectool.core.crypto.aes_gcm import Cipher, encrypt, decrypt
from sectool.core.crypto.key_manager import KeyManager
from sectool.core.crypto.kv_store import SecureKVStore

__all__ = [
    "Cipher",
    "encrypt",
    "decrypt",
    "KeyManager",
    "SecureKVStore",
]
