"""
Encrypted File Vault
====================

Reference VaultStore backend: the whole key space lives in one local file
holding a single AES-256-GCM token.

Files:
    <path>                  base64(nonce || ciphertext || tag)
    <path>_<YYYYMMDDHHMMSS> byte-identical pre-mutation backup
    <path>.unlocked         plaintext record set (between unlock and lock)

Security Properties:
    - Writes are atomic renames, so readers see the old or the new blob
    - Files are created with mode 0600
    - The unlocked working file is overwritten before removal
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from sectool.core.errors import VaultUnavailable
from sectool.core.file_ops.atomic_write import atomic_write_bytes
from sectool.core.file_ops.secure_delete import secure_delete
from sectool.core.memory.zeroization import ZeroizeContext
from sectool.core.vault.base import EncryptedBlobVaultStore, backup_name
from sectool.security.constants import UNLOCKED_SUFFIX, VAULT_FILE_MODE


class FileVaultStore(EncryptedBlobVaultStore):
    """
    Vault persisted as one encrypted file.

    Usage:
        vault = FileVaultStore("repository.vault", key="master-key")
        vault.set("DB_PASSWORD", "hunter2")
        vault.get("DB_PASSWORD")

    An absent or empty file is an empty vault.
    """

    def __init__(self, path: Path | str, key: str | bytes) -> None:
        super().__init__(key)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def unlocked_path(self) -> Path:
        return self._path.with_name(self._path.name + UNLOCKED_SUFFIX)

    def _read_blob(self) -> Optional[bytes]:
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise VaultUnavailable(f"Cannot read vault file: {self._path}") from e

    def _write_blob(self, blob: bytes) -> None:
        try:
            atomic_write_bytes(self._path, blob, mode=VAULT_FILE_MODE)
        except OSError as e:
            raise VaultUnavailable(f"Cannot write vault file: {self._path}") from e

    def _backup_blob(self) -> Optional[str]:
        if not self._path.exists():
            return None
        target = Path(backup_name(str(self._path)))
        try:
            shutil.copyfile(self._path, target)
            target.chmod(VAULT_FILE_MODE)
        except OSError as e:
            raise VaultUnavailable(f"Cannot back up vault file: {self._path}") from e
        return str(target)

    def initialize(self) -> None:
        with self._lock:
            if self._path.exists():
                return
            self._write_blob(b"")
        self._log.info(f"Initialized empty vault at {self._path}")

    def unlock(self) -> None:
        """
        Decrypt the vault into <path>.unlocked.

        No-op when the vault file does not exist.
        """
        with self._lock:
            blob = self._read_blob()
            if blob is None:
                return
            plaintext = b""
            if blob.strip():
                plaintext = self._cipher.decrypt(blob, self._key)
            try:
                atomic_write_bytes(self.unlocked_path, plaintext, mode=VAULT_FILE_MODE)
            except OSError as e:
                raise VaultUnavailable(
                    f"Cannot write working file: {self.unlocked_path}"
                ) from e
        self._log.warning(f"Vault unlocked to {self.unlocked_path}")

    def lock(self) -> None:
        """
        Re-encrypt <path>.unlocked into the vault and remove it.

        No-op when there is no working file.
        """
        with self._lock:
            working = self.unlocked_path
            try:
                plaintext = bytearray(working.read_bytes())
            except FileNotFoundError:
                return
            except OSError as e:
                raise VaultUnavailable(f"Cannot read working file: {working}") from e

            with ZeroizeContext(plaintext):
                token = self._cipher.encrypt(plaintext, self._key)
            if self._backup:
                self._backup_blob()
            self._write_blob(token.encode("ascii"))
            secure_delete(working)
        self._log.info(f"Vault locked: {self._path}")

    def __repr__(self) -> str:
        return f"FileVaultStore(path={str(self._path)!r})"
