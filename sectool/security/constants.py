"""
Security Constants
==================

Defines the fixed values shared by the vault, the composer and the
redacting executor. Changing any of these changes an external contract
(file format, child environment or exit status).
"""

from typing import Final

# Encryption Settings
ENCRYPTION_ALGORITHM: Final[str] = "AES-256-GCM"
KEY_LENGTH_BYTES: Final[int] = 32  # 256 bits
NONCE_LENGTH_BYTES: Final[int] = 12  # 96 bits for GCM
TAG_LENGTH_BYTES: Final[int] = 16  # 128 bits
KEY_DERIVATION_FUNCTION: Final[str] = "SHA-256"

# Vault Files
DEFAULT_VAULT_PATH: Final[str] = "repository.vault"
DEFAULT_OBJECT_NAME: Final[str] = "repository.vault"
UNLOCKED_SUFFIX: Final[str] = ".unlocked"
BACKUP_TIMESTAMP_FORMAT: Final[str] = "%Y%m%d%H%M%S"
VAULT_FILE_MODE: Final[int] = 0o600

# Environment Composition
DEFAULT_ENV_FILE: Final[str] = "sectool.env"
DEFAULT_CONFIG_FILE: Final[str] = "sectool.json"
COMMENT_MARKER: Final[str] = "#"
PLACEHOLDER_PATTERN: Final[str] = r"\s*\$([a-zA-Z_][a-zA-Z0-9_]*)"

# Internal SecureKVStore ids; the ":" keeps them out of placeholder reach
VAULT_KEY_ENTRY_ID: Final[str] = "sectool:vault-key"
LITERAL_ENTRY_PREFIX: Final[str] = "literal:"

# Child Process Contract
SENTINEL_ENV_NAME: Final[str] = "SECTOOL_ENV"
SENTINEL_ENV_VALUE: Final[str] = "1"
REDACTION_PLACEHOLDER: Final[str] = "[HIDDEN]"
READ_CHUNK_SIZE: Final[int] = 64 * 1024

# Exit Codes
EXIT_PRE_EXEC_FAILURE: Final[int] = 125
