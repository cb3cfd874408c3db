"""
Sectool Runtime Module
======================

Environment composition and redacting command execution.

Components:
- env_composer.py: env-file parsing, batch resolution, substitution
- redaction.py: whole-stream secret redaction
- executor.py: child process with concurrent redacting drainers
- session.py: the end-to-end exec operation
"""

from sectool.core.runtime.env_composer import (
    EnvironmentComposer,
    EnvironmentLine,
    parse_env_content,
    extract_placeholders,
)
from sectool.core.runtime.redaction import StreamRedactor, redact_text
from sectool.core.runtime.executor import RedactingExecutor, build_environment
from sectool.core.runtime.session import run_with_secrets

__all__ = [
    "EnvironmentComposer",
    "EnvironmentLine",
    "parse_env_content",
    "extract_placeholders",
    "StreamRedactor",
    "redact_text",
    "RedactingExecutor",
    "build_environment",
    "run_with_secrets",
]
