"""
Utils module - Utility functions and helpers.
"""

from sectool.utils.validators import ValidationError, validate_secret_key

__all__ = [
    "ValidationError",
    "validate_secret_key",
]
