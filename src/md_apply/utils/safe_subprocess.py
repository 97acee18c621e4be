"""Safe subprocess wrapper for external helper commands.

md-apply shells out for two things only: the optional lint/type-check run
and reading the system clipboard. This module wraps both so that:
- shell=True is never used
- executables are resolved on PATH before running
- every run has a timeout
- output is captured as text for the caller to interpret
"""

from __future__ import annotations

import asyncio
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

log = structlog.get_logger()


class CommandError(Exception):
    """Base exception for external command errors."""


class CommandNotFoundError(CommandError):
    """Raised when the executable is not available on PATH."""


class CommandTimeoutError(CommandError):
    """Raised when a command times out."""


@dataclass
class CommandResult:
    """Result of an external command execution."""

    stdout: str
    stderr: str
    return_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Return True if the command succeeded."""
        return self.return_code == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, stdout first."""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


class SafeCommandRunner:
    """Safe wrapper for running a single external executable.

    Example:
        runner = SafeCommandRunner(["mypy", "."])
        result = await runner.run()
        print(result.stdout)
    """

    # Default timeout for commands (seconds)
    DEFAULT_TIMEOUT = 60

    def __init__(
        self,
        command: Sequence[str],
        default_timeout: int = DEFAULT_TIMEOUT,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            command: Executable followed by its arguments.
            default_timeout: Default timeout for runs in seconds.
            cwd: Working directory for the command.

        Raises:
            ValueError: If the command is empty.
            CommandNotFoundError: If the executable is not found.
        """
        if not command:
            raise ValueError("Command must not be empty")

        executable = command[0]
        resolved_path = self._find_executable(executable)
        if not resolved_path:
            raise CommandNotFoundError(f"{executable} not found on PATH")

        self._command: list[str] = [resolved_path, *command[1:]]
        self._default_timeout = default_timeout
        self._cwd = cwd

    @staticmethod
    def _find_executable(name: str) -> str | None:
        """Find an executable in PATH."""
        return shutil.which(name)

    @classmethod
    def available(cls, name: str) -> bool:
        """Return True if ``name`` can be resolved on PATH."""
        return cls._find_executable(name) is not None

    @property
    def command(self) -> list[str]:
        """The resolved command line."""
        return list(self._command)

    async def run(self, timeout: int | None = None, input_text: str | None = None) -> CommandResult:
        """Run the command to completion.

        Args:
            timeout: Timeout in seconds (uses default if None).
            input_text: Text to feed on stdin.

        Returns:
            CommandResult with stdout, stderr, and return code.

        Raises:
            CommandTimeoutError: If the command times out.
            CommandError: If the process cannot be started.
        """
        cmd = self._command
        effective_timeout = timeout or self._default_timeout

        log.debug("executing_command", command=cmd, timeout=effective_timeout)

        def run_sync() -> subprocess.CompletedProcess[str]:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                input=input_text,
                timeout=effective_timeout,
                cwd=self._cwd,
                shell=False,
            )

        try:
            proc = await asyncio.wait_for(
                asyncio.to_thread(run_sync),
                timeout=effective_timeout + 5,  # Extra buffer for thread overhead
            )
        except subprocess.TimeoutExpired as e:
            log.error("command_timeout", command=cmd, timeout=effective_timeout)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {cmd}"
            ) from e
        except TimeoutError as e:
            log.error("command_timeout", command=cmd, timeout=effective_timeout)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {cmd}"
            ) from e
        except OSError as e:
            log.error("command_start_failed", command=cmd, error=str(e))
            raise CommandError(f"Could not run {cmd[0]}: {e}") from e

        return CommandResult(
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            return_code=proc.returncode,
            command=cmd,
        )
