"""Terminal backends that run one shell command in a working directory."""

from __future__ import annotations

import abc
import asyncio
import logging

import psutil
from pydantic import BaseModel

from cmdpilot.exceptions import ExecutionError

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124


class TerminalResult(BaseModel):
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


class BaseTerminal(abc.ABC):
    """Executes a command and reports its outcome.

    Non-zero exits are results, not errors; implementations raise only when the
    command could not be run at all.
    """

    @abc.abstractmethod
    async def execute(self, command: str, cwd: str) -> TerminalResult:
        ...  # pragma: no cover


class SubprocessTerminal(BaseTerminal):
    def __init__(self, timeout: float = 300.0) -> None:
        self.timeout = timeout

    async def execute(self, command: str, cwd: str) -> TerminalResult:
        try:
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ExecutionError(f"Failed to start command: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Command timed out after %ss: %s", self.timeout, command)
            self._kill_tree(proc.pid)
            await proc.wait()
            return TerminalResult(
                stderr=f"Command timed out after {self.timeout} seconds",
                exit_code=TIMEOUT_EXIT_CODE,
            )

        return TerminalResult(
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
            exit_code=proc.returncode if proc.returncode is not None else -1,
        )

    @staticmethod
    def _kill_tree(pid: int) -> None:
        try:
            parent = psutil.Process(pid)
        except psutil.NoSuchProcess:
            return
        for child in parent.children(recursive=True):
            try:
                child.kill()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        try:
            parent.kill()
        except psutil.NoSuchProcess:
            pass


class DryRunTerminal(BaseTerminal):
    async def execute(self, command: str, cwd: str) -> TerminalResult:
        return TerminalResult(stdout=f"[DRY RUN] Would execute: {command}")
