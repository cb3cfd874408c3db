"""
AES-256-GCM Token Cipher
========================

Implements the text-safe authenticated encryption used for every secret
the engine holds, both at rest and in memory.

Token Format:
    base64( nonce[12] || ciphertext || tag[16] )

Security Properties:
    - Key material of any length, hashed to a 256-bit key (SHA-256)
    - Fresh random 96-bit nonce per call (no counters, no shared state)
    - 128-bit authentication tag checked before any plaintext is returned

WARNING:
    - SHA-256 is not a password KDF; key material must already be high-entropy
    - Never catch AuthenticationFailed silently
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from typing import Final, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from sectool.core.errors import AuthenticationFailed, MalformedInput
from sectool.security.constants import (
    NONCE_LENGTH_BYTES,
    TAG_LENGTH_BYTES,
)

AES_NONCE_SIZE: Final[int] = NONCE_LENGTH_BYTES
AES_TAG_SIZE: Final[int] = TAG_LENGTH_BYTES
MIN_TOKEN_SIZE: Final[int] = AES_NONCE_SIZE + AES_TAG_SIZE

BytesLike = Union[bytes, bytearray, str]


def _to_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class Cipher:
    """
    AES-256-GCM token cipher.

    Usage:
        cipher = Cipher()
        token = cipher.encrypt(b"s3cr3t", key_material)
        plaintext = cipher.decrypt(token, key_material)

    Security Notes:
        - Tokens are ASCII (base64) so they can live in text files
        - Decrypt never returns partial plaintext
    """

    __slots__ = ()

    @staticmethod
    def derive_key(key_material: BytesLike) -> bytes:
        """
        Derive the 32-byte AES key from arbitrary key material.

        Returns:
            SHA-256 digest of the key material
        """
        return hashlib.sha256(_to_bytes(key_material)).digest()

    @staticmethod
    def generate_nonce() -> bytes:
        """
        Generate a cryptographically secure random nonce.

        Security:
            96-bit random nonces have negligible collision
            probability for up to 2^32 encryptions under one key.
        """
        return secrets.token_bytes(AES_NONCE_SIZE)

    def encrypt(self, plaintext: BytesLike, key_material: BytesLike) -> str:
        """
        Encrypt plaintext into a base64 token.

        Args:
            plaintext: Data to encrypt (str is UTF-8 encoded, may be empty)
            key_material: Key bytes or text of any length

        Returns:
            base64(nonce || ciphertext || tag) as str
        """
        nonce = self.generate_nonce()
        aesgcm = AESGCM(self.derive_key(key_material))
        sealed = aesgcm.encrypt(nonce, _to_bytes(plaintext), None)
        return base64.b64encode(nonce + sealed).decode("ascii")

    def decrypt(self, token: BytesLike, key_material: BytesLike) -> bytes:
        """
        Decrypt a token produced by encrypt().

        Raises:
            MalformedInput: If the token is not base64 or is truncated
            AuthenticationFailed: If the tag does not verify

        Security Notes:
            - Integrity is verified BEFORE any plaintext is returned
        """
        try:
            raw = base64.b64decode(_to_bytes(token).strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedInput("Token is not valid base64") from e

        if len(raw) < MIN_TOKEN_SIZE:
            raise MalformedInput(
                f"Token too short: {len(raw)} bytes (minimum {MIN_TOKEN_SIZE})"
            )

        nonce, sealed = raw[:AES_NONCE_SIZE], raw[AES_NONCE_SIZE:]
        aesgcm = AESGCM(self.derive_key(key_material))
        try:
            return aesgcm.decrypt(nonce, sealed, None)
        except InvalidTag as e:
            raise AuthenticationFailed(
                "Authentication failed (wrong key or tampered data)"
            ) from e

    def decrypt_text(self, token: BytesLike, key_material: BytesLike) -> str:
        """Decrypt a token and decode the plaintext as UTF-8."""
        plaintext = self.decrypt(token, key_material)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedInput("Plaintext is not valid UTF-8") from e

    @staticmethod
    def constant_time_compare(a: bytes, b: bytes) -> bool:
        """Compare two byte strings without leaking timing."""
        return hmac.compare_digest(a, b)


_DEFAULT_CIPHER: Final[Cipher] = Cipher()


def encrypt(plaintext: BytesLike, key_material: BytesLike) -> str:
    """Convenience wrapper around Cipher.encrypt."""
    return _DEFAULT_CIPHER.encrypt(plaintext, key_material)


def decrypt(token: BytesLike, key_material: BytesLike) -> bytes:
    """Convenience wrapper around Cipher.decrypt."""
    return _DEFAULT_CIPHER.decrypt(token, key_material)
