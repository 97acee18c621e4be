"""Abstract interfaces for input acquisition and operator interaction."""

from typing import Protocol


class InputSource(Protocol):
    """Where the markdown document comes from (a file or the clipboard)."""

    @property
    def description(self) -> str:
        """Human readable source name, e.g. ``file: notes.md``."""
        ...

    async def acquire(self) -> str:
        """
        Read the whole markdown document.

        Returns:
            Document text

        Raises:
            InputError: If the document cannot be read or is empty
        """
        ...


class Console(Protocol):
    """Operator-facing output and prompting.

    ``status`` carries progress lines (stderr in the terminal adapter);
    ``result`` carries the apply report (stdout).
    """

    def status(self, message: str) -> None:
        """Emit a progress/status line."""
        ...

    def result(self, message: str) -> None:
        """Emit report output."""
        ...

    async def prompt(self, message: str) -> str:
        """
        Ask the operator a question.

        Returns:
            The raw answer; empty string when no answer can be read
        """
        ...
