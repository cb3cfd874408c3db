"""
Secret-Safe Logging
===================

Console logging for the "sectool" logger hierarchy. Engine modules log
through logging.getLogger("sectool.<area>") and only ever name keys,
identifiers and line numbers; the filter here is the second line of
defense for anything that slips through.

Security Features:
- Vault key assignments and credential-looking 'name=value' pairs are masked
- Exact known secret strings can be masked as well
- Output goes to stderr, never to the stream a child process writes to
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Final, Iterable, Optional, Pattern

from sectool.core.config import LoggingConfig

ROOT_LOGGER_NAME: Final[str] = "sectool"
MASK: Final[str] = "[REDACTED]"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# (label, pattern); the whole match becomes "<label>=[REDACTED]"
_CREDENTIAL_PATTERNS: Final[tuple[tuple[str, Pattern[str]], ...]] = (
    ("vault_key", re.compile(r"(?i)\b(file_vault_key|vault[_-]?key)\s*[=:]\s*\S+")),
    ("password", re.compile(r"(?i)\b(password|passwd|pwd)\s*[=:]\s*\S+")),
    ("api_key", re.compile(r"(?i)\b(api[_-]?key)\s*[=:]\s*\S+")),
    ("token", re.compile(r"(?i)\b(token|bearer)\s*[=:]\s*\S+")),
    ("secret", re.compile(r"(?i)\b(secret|private[_-]?key)\s*[=:]\s*\S+")),
)


class SecureLogFilter(logging.Filter):
    """
    Mask secrets in a record's message and arguments.

    Never drops a record.
    """

    def __init__(self, name: str = "", known_secrets: Optional[Iterable[str]] = None) -> None:
        super().__init__(name)
        ordered = sorted({s for s in (known_secrets or ()) if s}, key=len, reverse=True)
        self._known: Optional[Pattern[str]] = (
            re.compile("|".join(map(re.escape, ordered))) if ordered else None
        )

    def mask(self, text: str) -> str:
        if self._known is not None:
            text = self._known.sub(MASK, text)
        for label, pattern in _CREDENTIAL_PATTERNS:
            text = pattern.sub(f"{label}={MASK}", text)
        return text

    def _mask_arg(self, value: object) -> object:
        return self.mask(value) if isinstance(value, str) else value

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.mask(record.msg)
        if isinstance(record.args, dict):
            record.args = {k: self._mask_arg(v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._mask_arg(a) for a in record.args)
        return True


def get_secure_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    enable_console: bool = True,
    known_secrets: Optional[Iterable[str]] = None,
) -> logging.Logger:
    """
    Return the named logger, attaching a masked stderr handler on first use.

    Args:
        name: Logger name; "sectool" covers every engine module
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (any case)
        enable_console: Attach a stderr handler, else a NullHandler
        known_secrets: Exact strings to mask in every record

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level.upper())
    if enable_console:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        handler.addFilter(SecureLogFilter(known_secrets=known_secrets))
    else:
        handler = logging.NullHandler()
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Apply a LoggingConfig to the "sectool" logger."""
    return get_secure_logger(ROOT_LOGGER_NAME, config.level, config.enable_console)
