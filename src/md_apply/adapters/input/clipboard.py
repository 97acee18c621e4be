"""Markdown input read from the system clipboard.

There is no portable clipboard API, so the platform's paste utility is run
through SafeCommandRunner. Detection order:
- pbpaste (macOS)
- wl-paste (Wayland)
- xclip, xsel (X11)
- powershell Get-Clipboard (Windows)
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from ...utils.async_helpers import ClipboardError
from ...utils.logging import LogEventNames
from ...utils.safe_subprocess import CommandError, SafeCommandRunner

log = structlog.get_logger()

PASTE_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbpaste",),
    ("wl-paste", "--no-newline"),
    ("xclip", "-selection", "clipboard", "-o"),
    ("xsel", "--clipboard", "--output"),
    ("powershell", "-NoProfile", "-Command", "Get-Clipboard"),
)

NO_CLIPBOARD_HINT = "Install a clipboard utility (e.g. xclip) or use -i/--input to read from a file."


def detect_paste_command() -> list[str] | None:
    """First paste command whose executable is on PATH."""
    for command in PASTE_COMMANDS:
        if SafeCommandRunner.available(command[0]):
            return list(command)
    return None


class ClipboardInputSource:
    """InputSource that reads the current clipboard text."""

    def __init__(self, command: Sequence[str] | None = None, timeout: int = 10) -> None:
        """Initialize the clipboard source.

        Args:
            command: Paste command override; auto-detected if None
            timeout: Seconds to wait for the paste command
        """
        self._command = list(command) if command else None
        self._timeout = timeout

    @property
    def description(self) -> str:
        return "clipboard"

    async def acquire(self) -> str:
        """Read the clipboard.

        Raises:
            ClipboardError: If no paste command works or the clipboard
                holds no text
        """
        command = self._command or detect_paste_command()
        if command is None:
            raise ClipboardError("No clipboard utility found", hint=NO_CLIPBOARD_HINT)

        log.debug(LogEventNames.INPUT_READING, source="clipboard", command=command[0])

        try:
            runner = SafeCommandRunner(command, default_timeout=self._timeout)
            result = await runner.run()
        except CommandError as e:
            raise ClipboardError(f"Failed to read clipboard: {e}", hint=NO_CLIPBOARD_HINT) from e

        if not result.success:
            detail = result.stderr.strip() or f"exit status {result.return_code}"
            raise ClipboardError(f"Failed to read clipboard: {detail}", hint=NO_CLIPBOARD_HINT)

        text = result.stdout
        if not text.strip():
            raise ClipboardError(
                "Clipboard is empty",
                hint="Copy the markdown to the clipboard, or use -i/--input to read from a file.",
            )

        log.info(LogEventNames.INPUT_READ, source="clipboard", length=len(text))
        return text
