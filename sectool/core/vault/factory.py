"""
Vault Backend Factory
=====================

Selects a VaultStore implementation from the configuration's provider tag.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict

from sectool.core.config import (
    PROVIDER_FILE,
    PROVIDER_MEMORY,
    PROVIDER_OBJECT_STORAGE,
    VaultConfig,
)
from sectool.core.errors import ConfigError
from sectool.core.vault.base import VaultStore
from sectool.core.vault.file_vault import FileVaultStore
from sectool.core.vault.memory_vault import MemoryVaultStore
from sectool.core.vault.object_storage_vault import ObjectStorageVaultStore

_log = logging.getLogger("sectool.vault")


def _build_file(config: VaultConfig) -> VaultStore:
    settings = config.file
    if not settings.key:
        raise ConfigError("FILE_VAULT_KEY is not defined, aborting.")
    return FileVaultStore(settings.path, settings.key)


def _build_memory(config: VaultConfig) -> VaultStore:
    return MemoryVaultStore()


def _build_object_storage(config: VaultConfig) -> VaultStore:
    settings = config.object_storage
    if not settings.bucket:
        raise ConfigError("Object storage bucket is not configured")
    if not settings.key:
        raise ConfigError("FILE_VAULT_KEY is not defined, aborting.")
    store = ObjectStorageVaultStore(
        bucket=settings.bucket,
        key=settings.key,
        region=settings.region,
        endpoint=settings.endpoint,
        object_name=settings.object_name,
    )
    store.enable_backup(settings.backup)
    return store


_BUILDERS: Dict[str, Callable[[VaultConfig], VaultStore]] = {
    PROVIDER_FILE: _build_file,
    PROVIDER_MEMORY: _build_memory,
    PROVIDER_OBJECT_STORAGE: _build_object_storage,
}


def create_vault_store(config: VaultConfig) -> VaultStore:
    """
    Build the backend named by config.provider.

    Raises:
        ConfigError: If the provider is unknown or its settings are incomplete
    """
    builder = _BUILDERS.get(config.provider)
    if builder is None:
        raise ConfigError(f"Unsupported vault provider: {config.provider!r}")
    store = builder(config)
    _log.debug(f"Using vault backend {store!r}")
    return store
