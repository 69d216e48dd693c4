"""Async subprocess helper shared by the source adapters.

The search path is passed in explicitly and used both to resolve binaries
and as the child's PATH; the process-wide environment is never modified.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from collections.abc import Callable

import structlog

from .config import ScanConfig
from .errors import SourceUnavailable, SubprocessExecutionFailure

log = structlog.get_logger("toolsweep.runner")

Resolver = Callable[[str], "str | None"]


class CommandRunner:
    """Run external tools with a fixed search path and timeout."""

    def __init__(
        self,
        search_path: str | None = None,
        timeout: float = 5.0,
        resolver: Resolver | None = None,
    ) -> None:
        self.search_path = search_path if search_path is not None else os.environ.get("PATH", "")
        self.timeout = timeout
        self._resolver = resolver

    @classmethod
    def from_config(cls, config: ScanConfig) -> "CommandRunner":
        return cls(search_path=config.search_path(), timeout=config.command_timeout)

    def resolve(self, name: str) -> str | None:
        """Locate a binary. On Windows shutil.which also tries npm.cmd etc. via PATHEXT."""
        if self._resolver is not None:
            return self._resolver(name)
        return shutil.which(name, path=self.search_path)

    def available(self, name: str) -> bool:
        return self.resolve(name) is not None

    async def run(self, name: str, *args: str, check: bool = True) -> str:
        """Run ``name args...`` and return decoded stdout.

        Raises SourceUnavailable if the binary cannot be resolved, and
        SubprocessExecutionFailure on spawn failure, timeout, or (with
        ``check``) a non-zero exit.
        """
        binary = self.resolve(name)
        if binary is None:
            raise SourceUnavailable(name)
        cmd = [binary, *args]
        env = {**os.environ, "PATH": self.search_path}
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
            )
        except OSError as e:
            raise SubprocessExecutionFailure([name, *args], str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            log.warning("runner.timeout", command=name, args=list(args), timeout=self.timeout)
            raise SubprocessExecutionFailure([name, *args], f"timed out after {self.timeout}s")
        finally:
            # also reached on cancellation, e.g. when the adapter's own deadline expires
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()

        if check and proc.returncode != 0:
            raise SubprocessExecutionFailure(
                [name, *args],
                f"exit {proc.returncode}: {stderr.decode(errors='replace').strip()[:200]}",
                returncode=proc.returncode,
            )
        return stdout.decode("utf-8", errors="replace")
