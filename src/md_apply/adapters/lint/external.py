"""Lint runner that shells out to an external checker such as mypy."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

import structlog

from ...models.results import LintCounts
from ...utils.logging import LogEventNames
from ...utils.safe_subprocess import CommandError, SafeCommandRunner

log = structlog.get_logger()

ERROR_PATTERN = re.compile(r"\berror\b", re.IGNORECASE)
WARNING_PATTERN = re.compile(r"\bwarning\b", re.IGNORECASE)


def count_diagnostics(output: str) -> LintCounts:
    """Count output lines that mention ``error`` or ``warning``.

    Summary lines such as mypy's ``Found 3 errors`` do not match the
    singular word and are not counted.
    """
    errors = 0
    warnings = 0
    for line in output.splitlines():
        if ERROR_PATTERN.search(line):
            errors += 1
        elif WARNING_PATTERN.search(line):
            warnings += 1
    return LintCounts(error_count=errors, warning_count=warnings)


class SubprocessLintRunner:
    """LintRunner running one command and counting its diagnostics.

    A non-zero exit status is normal for checkers that found problems; only
    a command that cannot run at all, or times out, yields no data.
    """

    def __init__(
        self,
        command: Sequence[str] = ("mypy", "."),
        timeout: int = 300,
        cwd: Path | None = None,
    ) -> None:
        self._command = list(command)
        self._timeout = timeout
        self._cwd = cwd

    async def run(self) -> LintCounts | None:
        log.debug(LogEventNames.LINT_STARTED, command=self._command)

        try:
            runner = SafeCommandRunner(self._command, default_timeout=self._timeout, cwd=self._cwd)
            result = await runner.run()
        except (CommandError, ValueError) as e:
            log.warning(LogEventNames.LINT_UNAVAILABLE, command=self._command, error=str(e))
            return None

        counts = count_diagnostics(result.output)
        log.info(
            LogEventNames.LINT_COMPLETE,
            return_code=result.return_code,
            errors=counts.error_count,
            warnings=counts.warning_count,
        )
        return counts
