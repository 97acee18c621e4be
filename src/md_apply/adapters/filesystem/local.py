"""Local disk implementation of the FileSystem protocol.

Text is read and written with ``newline=""`` so line endings pass through
untouched: a restored file is byte-identical to its snapshot. Blocking
calls run in the default thread pool.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath

import structlog

from ...utils.async_helpers import run_blocking

log = structlog.get_logger()


class LocalFileSystem:
    """FileSystem backed by the local disk, rooted at a working directory.

    Example:
        fs = LocalFileSystem(Path.cwd())
        if not await fs.path_exists("src/app.py"):
            await fs.make_directories("src")
        await fs.write_text("src/app.py", "print('hi')\\n", "utf-8")
    """

    def __init__(self, root: Path | str | None = None) -> None:
        """Initialize the filesystem.

        Args:
            root: Working root for relative paths. Defaults to the current
                directory at construction time.
        """
        self._root = Path(os.path.abspath(root if root is not None else os.getcwd()))

    @property
    def root(self) -> Path:
        """Working root that relative paths resolve against."""
        return self._root

    def resolve(self, path: str) -> Path:
        """Absolute, normalized location of ``path`` (symlinks not followed)."""
        return Path(os.path.abspath(self._root / path))

    def parent_of(self, path: str) -> str:
        """Parent of ``path`` in document notation."""
        return str(PurePath(path).parent)

    async def path_exists(self, path: str) -> bool:
        return await run_blocking(os.path.lexists, self.resolve(path))

    async def is_directory(self, path: str) -> bool:
        return await run_blocking(os.path.isdir, self.resolve(path))

    async def read_text(self, path: str, encoding: str) -> str:
        def read() -> str:
            with open(self.resolve(path), encoding=encoding, newline="") as f:
                return f.read()

        return await run_blocking(read)

    async def write_text(self, path: str, content: str, encoding: str) -> None:
        def write() -> None:
            with open(self.resolve(path), "w", encoding=encoding, newline="") as f:
                f.write(content)

        await run_blocking(write)

    async def make_directories(self, path: str) -> None:
        await run_blocking(os.makedirs, self.resolve(path), exist_ok=True)

    async def delete_file(self, path: str) -> None:
        await run_blocking(os.unlink, self.resolve(path))

    async def remove_empty_directory(self, path: str) -> None:
        await run_blocking(os.rmdir, self.resolve(path))

    async def list_directory(self, path: str) -> list[str]:
        return await run_blocking(os.listdir, self.resolve(path))
