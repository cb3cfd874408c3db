"""
Core module - configuration, logging, errors and the engine components.
"""

from sectool.core.config import SectoolConfig
from sectool.core.logging import get_secure_logger, configure_logging, SecureLogFilter

__all__ = ["SectoolConfig", "get_secure_logger", "configure_logging", "SecureLogFilter"]
