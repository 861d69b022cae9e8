"""Execution of the test command through the system shell."""

import asyncio
import logging
import os
import signal
from abc import ABC, abstractmethod
from contextlib import suppress
from dataclasses import dataclass

from flaky_detector.models.report import RunResult

log = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 10 * 1024 * 1024
EXECUTION_ERROR_EXIT_CODE = 1
READ_CHUNK_SIZE = 64 * 1024


class OutputLimitExceededError(Exception):
    """Raised when a command writes more output than allowed."""


class CommandExecutor(ABC):
    """Runs the test command once and reports its outcome."""

    @abstractmethod
    async def execute(self, command: str) -> RunResult:
        """Run the command once.

        Implementations must not raise for execution failures: a command
        that cannot be started is reported as a failed RunResult.
        """


@dataclass
class _OutputBudget:
    remaining: int


@dataclass(frozen=True, kw_only=True)
class ShellExecutor(CommandExecutor):
    """Executor running commands through the system shell."""

    max_output_bytes: int = MAX_OUTPUT_BYTES

    async def execute(self, command: str) -> RunResult:
        """Run the command and classify success as exit status zero."""
        try:
            exit_code, stdout, stderr = await self._run(command)
        except (OSError, ValueError, OutputLimitExceededError) as e:
            log.debug("Command execution failed: %s", e)
            return RunResult(
                success=False,
                exit_code=EXECUTION_ERROR_EXIT_CODE,
                stdout="",
                stderr=str(e) or "Command execution failed",
            )

        return RunResult(
            success=exit_code == 0,
            exit_code=exit_code,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def _run(self, command: str) -> tuple[int, bytes, bytes]:
        # A new session makes the shell the leader of a process group that
        # also holds everything it forks.
        process = await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
        if process.stdout is None or process.stderr is None:
            raise OSError("Command output pipes are unavailable")

        budget = _OutputBudget(remaining=self.max_output_bytes)
        drains = [
            asyncio.create_task(self._drain(process.stdout, budget)),
            asyncio.create_task(self._drain(process.stderr, budget)),
        ]
        try:
            stdout, stderr = await asyncio.gather(*drains)
        except BaseException:
            # Children of the shell hold the pipes open until the group is gone.
            _kill_group(process)
            for task in drains:
                task.cancel()
            await asyncio.gather(*drains, return_exceptions=True)
            await process.wait()
            raise

        returncode = await process.wait()
        return _normalize_returncode(returncode), stdout, stderr

    async def _drain(
        self, stream: asyncio.StreamReader, budget: _OutputBudget
    ) -> bytes:
        chunks: list[bytes] = []
        while chunk := await stream.read(READ_CHUNK_SIZE):
            budget.remaining -= len(chunk)
            if budget.remaining < 0:
                raise OutputLimitExceededError(
                    f"Command output exceeded {self.max_output_bytes} bytes"
                )
            chunks.append(chunk)
        return b"".join(chunks)


def _kill_group(process: asyncio.subprocess.Process) -> None:
    with suppress(ProcessLookupError):
        os.killpg(process.pid, signal.SIGKILL)


def _normalize_returncode(returncode: int) -> int:
    # Negative return codes mean the process was killed by a signal.
    if returncode < 0:
        return 128 - returncode
    return returncode
