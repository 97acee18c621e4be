"""Console implementation for an interactive terminal."""

from __future__ import annotations

import sys
from typing import TextIO

from ...utils.async_helpers import run_blocking


class TerminalConsole:
    """Status lines to stderr, the report to stdout, prompts via ``input()``."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self._out = out
        self._err = err

    def status(self, message: str) -> None:
        print(message, file=self._err or sys.stderr, flush=True)

    def result(self, message: str) -> None:
        print(message, file=self._out or sys.stdout, flush=True)

    async def prompt(self, message: str) -> str:
        """Ask a question; end of input counts as an empty answer."""
        try:
            return await run_blocking(input, message)
        except EOFError:
            return ""
