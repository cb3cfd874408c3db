"""
Sectool Memory Security Module
==============================

Best-effort wiping of key buffers held by the KeyManager.
"""

from sectool.core.memory.zeroization import secure_zero, ZeroizeContext

__all__ = ["secure_zero", "ZeroizeContext"]
