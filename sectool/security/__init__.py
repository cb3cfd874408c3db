"""
Security module - fixed constants shared across the engine.
"""

from sectool.security.constants import (
    ENCRYPTION_ALGORITHM,
    KEY_DERIVATION_FUNCTION,
    REDACTION_PLACEHOLDER,
    SENTINEL_ENV_NAME,
    EXIT_PRE_EXEC_FAILURE,
)

__all__ = [
    "ENCRYPTION_ALGORITHM",
    "KEY_DERIVATION_FUNCTION",
    "REDACTION_PLACEHOLDER",
    "SENTINEL_ENV_NAME",
    "EXIT_PRE_EXEC_FAILURE",
]
