"""
Sectool Vault Module
====================

At-rest secret storage behind one contract (VaultStore) with
interchangeable backends chosen by configuration.

Components:
- base.py: VaultStore contract and the shared encrypted-blob logic
- records.py: plaintext record set layout
- file_vault.py: reference backend, one encrypted local file
- memory_vault.py: dictionary backend
- object_storage_vault.py: one encrypted object in a bucket
- factory.py: provider tag -> backend
"""

from sectool.core.vault.base import (
    SecretSink,
    VaultStore,
    EncryptedBlobVaultStore,
    backup_name,
)
from sectool.core.vault.file_vault import FileVaultStore
from sectool.core.vault.memory_vault import MemoryVaultStore
from sectool.core.vault.object_storage_vault import ObjectStorageVaultStore
from sectool.core.vault.factory import create_vault_store

__all__ = [
    "SecretSink",
    "VaultStore",
    "EncryptedBlobVaultStore",
    "backup_name",
    "FileVaultStore",
    "MemoryVaultStore",
    "ObjectStorageVaultStore",
    "create_vault_store",
]
