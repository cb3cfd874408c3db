"""
Redacting Executor
==================

Runs a child process with the composed environment and scrubs every known
secret from its stdout and stderr before it reaches the console.

Concurrency:
    - one draining thread per output pipe
    - the calling thread waits for the child, then joins both drainers
    - redaction happens inline in each drainer, so a slow console
      backpressures the child through normal pipe flow control

Ordering:
    - order within one stream is preserved
    - interleaving between stdout and stderr is not
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import threading
from typing import BinaryIO, Dict, Iterable, List, Mapping, Optional, Sequence

from sectool.core.crypto.kv_store import SecureKVStore
from sectool.core.errors import ChildNonZeroExit, ProcessLaunchFailed
from sectool.core.runtime.redaction import StreamRedactor
from sectool.security.constants import (
    READ_CHUNK_SIZE,
    REDACTION_PLACEHOLDER,
    SENTINEL_ENV_NAME,
    SENTINEL_ENV_VALUE,
)


def build_environment(
    composed: Iterable[str],
    base: Optional[Mapping[str, str]] = None,
    sentinel: tuple[str, str] = (SENTINEL_ENV_NAME, SENTINEL_ENV_VALUE),
) -> Dict[str, str]:
    """
    Inherited environment, then the sentinel, then composed entries.

    Later entries override earlier ones with the same name.
    """
    env = dict(os.environ if base is None else base)
    env[sentinel[0]] = sentinel[1]
    for entry in composed:
        name, _, value = entry.partition("=")
        env[name] = value
    return env


def exit_code_of(returncode: int) -> int:
    """Map Popen.returncode to a shell-style status (signals -> 128+N)."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class RedactingExecutor:
    """
    Spawn a command and redact its output.

    Usage:
        executor = RedactingExecutor(kv_store)
        code = executor.run(["deploy.sh"], composed_environment)

    The redaction set is every value in the SecureKVStore at the time
    run() is called; the store is only read, never mutated.
    """

    __slots__ = (
        "_kv", "_stdout", "_stderr", "_placeholder",
        "_sentinel", "_quiet", "_log",
    )

    def __init__(
        self,
        kv_store: SecureKVStore,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
        placeholder: str = REDACTION_PLACEHOLDER,
        sentinel: tuple[str, str] = (SENTINEL_ENV_NAME, SENTINEL_ENV_VALUE),
        quiet: bool = False,
    ) -> None:
        """
        Args:
            kv_store: Store holding every value that must never be printed
            stdout: Binary sink for the child's stdout (default: our stdout)
            stderr: Binary sink for the child's stderr (default: our stderr)
            placeholder: Replacement text for redacted secrets
            sentinel: (name, value) variable marking injected environments
            quiet: Discard the child's output entirely
        """
        self._kv = kv_store
        self._stdout = stdout
        self._stderr = stderr
        self._placeholder = placeholder
        self._sentinel = sentinel
        self._quiet = quiet
        self._log = logging.getLogger("sectool.exec")

    def build_environment(
        self,
        composed: Iterable[str],
        base: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        return build_environment(composed, base=base, sentinel=self._sentinel)

    def _redactor(self) -> StreamRedactor:
        return StreamRedactor(self._kv.reveal_values(), self._placeholder)

    def run(
        self,
        argv: Sequence[str],
        composed: Iterable[str] = (),
        *,
        cwd: Optional[str] = None,
        check: bool = False,
    ) -> int:
        """
        Run argv to completion and return its exit code.

        Raises:
            ProcessLaunchFailed: If the command cannot be started, including
                arguments or environment values the OS rejects
            ChildNonZeroExit: If check is set and the child fails
        """
        if not argv:
            raise ProcessLaunchFailed("", "empty command")

        env = self.build_environment(composed)
        # Compiled before the child exists so both drainers share a fixed set
        stdout_redactor = self._redactor()
        stderr_redactor = self._redactor()
        target = subprocess.DEVNULL if self._quiet else subprocess.PIPE

        try:
            process = subprocess.Popen(
                list(argv),
                env=env,
                cwd=cwd,
                stdin=None,
                stdout=target,
                stderr=target,
            )
        except OSError as e:
            raise ProcessLaunchFailed(argv[0], e.strerror or type(e).__name__) from e
        except ValueError as e:
            # e.g. a NUL byte in an argument or environment value
            raise ProcessLaunchFailed(argv[0], "invalid argument or environment") from e

        drainers: List[threading.Thread] = []
        if self._quiet:
            self._log.info("Command started.")
        else:
            drainers = [
                self._start_drainer(process.stdout, self._sink(self._stdout, sys.stdout), stdout_redactor, "stdout"),
                self._start_drainer(process.stderr, self._sink(self._stderr, sys.stderr), stderr_redactor, "stderr"),
            ]

        returncode = process.wait()
        for drainer in drainers:
            drainer.join()

        code = exit_code_of(returncode)
        self._log.debug(f"Command {argv[0]!r} exited with status {code}")
        if check and code != 0:
            raise ChildNonZeroExit(code)
        return code

    @staticmethod
    def _sink(explicit: Optional[BinaryIO], console) -> BinaryIO:
        if explicit is not None:
            return explicit
        return getattr(console, "buffer", console)

    def _start_drainer(
        self,
        pipe: BinaryIO,
        sink: BinaryIO,
        redactor: StreamRedactor,
        name: str,
    ) -> threading.Thread:
        thread = threading.Thread(
            target=self._drain,
            args=(pipe, sink, redactor),
            name=f"sectool-{name}",
            daemon=True,
        )
        thread.start()
        return thread

    @staticmethod
    def _drain(pipe: BinaryIO, sink: BinaryIO, redactor: StreamRedactor) -> None:
        """Copy pipe to sink through the redactor until EOF."""
        with pipe:
            while True:
                chunk = pipe.read1(READ_CHUNK_SIZE)
                if not chunk:
                    break
                out = redactor.feed(chunk)
                if out:
                    sink.write(out)
                    sink.flush()
        tail = redactor.flush()
        if tail:
            sink.write(tail)
        sink.flush()
