"""
Sectool File Operations Module
==============================

Whole-file atomic replacement for vault blobs and secure deletion of
plaintext working files.
"""

from sectool.core.file_ops.atomic_write import atomic_write_bytes
from sectool.core.file_ops.secure_delete import secure_delete, SecureDeleteError

__all__ = [
    "atomic_write_bytes",
    "secure_delete",
    "SecureDeleteError",
]
