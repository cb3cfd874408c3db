"""Shared fixtures for the sectool test suite."""
import pytest

from sectool.core.crypto import KeyManager, SecureKVStore
from sectool.core.vault import FileVaultStore, MemoryVaultStore


@pytest.fixture
def kv_store():
    """A fresh envelope-encrypted cache."""
    store = SecureKVStore(KeyManager())
    yield store
    store.clear()


@pytest.fixture
def memory_vault():
    """A memory vault with two secrets."""
    return MemoryVaultStore({"S": "secret1", "DB_PASS": "hunter2"})


@pytest.fixture
def vault_path(tmp_path):
    return tmp_path / "repository.vault"


@pytest.fixture
def file_vault(vault_path):
    """A file vault under a temporary directory."""
    return FileVaultStore(vault_path, "master-key")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the config loader reads."""
    import os

    for name in list(os.environ):
        if name.startswith("SECTOOL_") or name in ("FILE_VAULT_KEY", "FILE_VAULT_PATH"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def sectool_logger():
    """The "sectool" logger, unconfigured before and after the test."""
    import logging

    logger = logging.getLogger("sectool")

    def reset():
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    reset()
    yield logger
    reset()
