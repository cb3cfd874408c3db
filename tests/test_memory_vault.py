"""Tests for the dictionary-backed vault."""
import pytest

from sectool.core.errors import SecretNotFound
from sectool.core.vault import MemoryVaultStore, VaultStore


class TestMemoryVault:

    def test_is_vault_store(self, memory_vault):
        assert isinstance(memory_vault, VaultStore)

    def test_initial_values(self, memory_vault):
        assert memory_vault.list_keys() == {"S", "DB_PASS"}
        assert memory_vault.get("S") == "secret1"

    def test_get_many_omits_missing(self, memory_vault, kv_store):
        memory_vault.get_many(["S", "NOPE"], kv_store)
        assert kv_store.list_keys() == {"S"}

    def test_delete_missing(self, memory_vault):
        with pytest.raises(SecretNotFound):
            memory_vault.delete("NOPE")

    def test_backups_snapshot_previous_state(self):
        vault = MemoryVaultStore({"A": "1"})
        vault.enable_backup(True)
        vault.set("B", "2")
        vault.delete("A")
        assert [snapshot for _, snapshot in vault.backups] == [
            {"A": "1"},
            {"A": "1", "B": "2"},
        ]
        assert all(name.startswith("memory_") for name, _ in vault.backups)

    def test_lock_unlock_are_noops(self, memory_vault):
        memory_vault.unlock()
        memory_vault.lock()
        assert memory_vault.has("S")
