"""Abstract interface for the filesystem primitives used by apply and revert."""

from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    """Raw filesystem capability set.

    Paths handed to these methods are the block paths exactly as written in
    the markdown document; implementations resolve relative paths against
    ``root``. Methods raise ``OSError`` subclasses on failure
    (``FileNotFoundError`` for a missing target).
    """

    @property
    def root(self) -> Path:
        """Working root that relative paths resolve against."""
        ...

    def resolve(self, path: str) -> Path:
        """
        Resolve a document path to an absolute location.

        Args:
            path: Path as written in the document

        Returns:
            Absolute path (not required to exist)
        """
        ...

    def parent_of(self, path: str) -> str:
        """Return the parent of ``path`` in the same notation."""
        ...

    async def path_exists(self, path: str) -> bool:
        """Return True if anything exists at ``path``."""
        ...

    async def is_directory(self, path: str) -> bool:
        """Return True if ``path`` is an existing directory."""
        ...

    async def read_text(self, path: str, encoding: str) -> str:
        """
        Read a file's full text without newline translation.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be read
            UnicodeDecodeError: If the bytes are not valid in ``encoding``
        """
        ...

    async def write_text(self, path: str, content: str, encoding: str) -> None:
        """
        Replace a file's content, creating the file if needed.

        Raises:
            OSError: If the file cannot be written
        """
        ...

    async def make_directories(self, path: str) -> None:
        """Create ``path`` and any missing parents; no-op if it exists."""
        ...

    async def delete_file(self, path: str) -> None:
        """
        Delete a file.

        Raises:
            FileNotFoundError: If the file is already gone
        """
        ...

    async def remove_empty_directory(self, path: str) -> None:
        """
        Remove a directory that must be empty.

        Raises:
            FileNotFoundError: If the directory is already gone
            OSError: If the directory is not empty or cannot be removed
        """
        ...

    async def list_directory(self, path: str) -> list[str]:
        """Return the entry names inside a directory."""
        ...
