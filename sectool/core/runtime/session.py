"""
Secret-Injected Command Runs
============================

The exec operation: compose an environment from an env-file and a vault,
then run a command through the RedactingExecutor.

Every invocation builds its own KeyManager and SecureKVStore; nothing is
shared between runs.

Exit status:
    0                       the command succeeded
    EXIT_PRE_EXEC_FAILURE   config, vault, composition or launch failed;
                            the command never ran
    anything else           the command's own exit status
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from sectool.core.config import SectoolConfig
from sectool.core.crypto.key_manager import KeyManager
from sectool.core.crypto.kv_store import SecureKVStore
from sectool.core.errors import SectoolError
from sectool.core.logging import configure_logging
from sectool.core.runtime.env_composer import EnvironmentComposer
from sectool.core.runtime.executor import RedactingExecutor
from sectool.core.vault.base import VaultStore
from sectool.core.vault.factory import create_vault_store
from sectool.security.constants import EXIT_PRE_EXEC_FAILURE

_log = logging.getLogger("sectool.exec")


def run_with_secrets(
    argv: Sequence[str],
    vault: Optional[VaultStore] = None,
    env_file: Optional[Path | str] = None,
    *,
    config: Optional[SectoolConfig] = None,
    stdout: Optional[BinaryIO] = None,
    stderr: Optional[BinaryIO] = None,
    quiet: bool = False,
) -> int:
    """
    Run argv with secrets from vault injected per env_file.

    Args:
        argv: Command and arguments
        vault: Backend to resolve from (built from config when omitted)
        env_file: Env-file path (config.exec.env_file when omitted)
        config: Configuration; when omitted it is loaded with
            SectoolConfig.load() and its logging section applied
        stdout: Binary sink for redacted stdout
        stderr: Binary sink for redacted stderr
        quiet: Discard the command's output

    Returns:
        Process exit status, see module docstring
    """
    kv_store = SecureKVStore(KeyManager())
    try:
        if config is None:
            config = SectoolConfig.load()
            configure_logging(config.logging)
        if vault is None:
            vault = create_vault_store(config.vault)
        if env_file is None:
            env_file = config.exec.env_file

        vault.register_sensitive(kv_store)
        composer = EnvironmentComposer(vault, kv_store)
        composed = composer.compose_file(env_file)

        executor = RedactingExecutor(
            kv_store,
            stdout=stdout,
            stderr=stderr,
            placeholder=config.exec.placeholder,
            sentinel=(config.exec.sentinel_name, config.exec.sentinel_value),
            quiet=quiet,
        )
        return executor.run(argv, composed)
    except SectoolError as e:
        _log.error(str(e))
        return EXIT_PRE_EXEC_FAILURE
    finally:
        kv_store.clear()
