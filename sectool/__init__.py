"""
Sectool - Secret Injection and Redacting Execution
==================================================

Stores secrets at rest under authenticated encryption, resolves $NAME
references from an env-file into a child process environment, and scrubs
secret values from the child's output as it streams.

Security Notice:
- No secret values are logged
- Fail-closed: any vault or composition error aborts before the child runs
- Plaintext crosses into the child's environment only, by design
"""

from sectool.core.config import SectoolConfig
from sectool.core.logging import get_secure_logger
from sectool.core.crypto import Cipher, KeyManager, SecureKVStore
from sectool.core.vault import (
    VaultStore,
    FileVaultStore,
    MemoryVaultStore,
    ObjectStorageVaultStore,
    create_vault_store,
)
from sectool.core.runtime import (
    EnvironmentComposer,
    RedactingExecutor,
    StreamRedactor,
    run_with_secrets,
)

__version__ = "0.1.0"

__all__ = [
    "SectoolConfig",
    "get_secure_logger",
    "Cipher",
    "KeyManager",
    "SecureKVStore",
    "VaultStore",
    "FileVaultStore",
    "MemoryVaultStore",
    "ObjectStorageVaultStore",
    "create_vault_store",
    "EnvironmentComposer",
    "RedactingExecutor",
    "StreamRedactor",
    "run_with_secrets",
    "__version__",
]
