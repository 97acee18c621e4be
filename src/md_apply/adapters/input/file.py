"""Markdown input read from a file on disk."""

from __future__ import annotations

import codecs
from pathlib import Path

import structlog

from ...utils.async_helpers import FileInputError, run_blocking
from ...utils.logging import LogEventNames

log = structlog.get_logger()


class FileInputSource:
    """InputSource that reads a whole markdown file.

    A UTF-8 byte order mark is tolerated and dropped.
    """

    def __init__(self, path: Path | str, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    @property
    def description(self) -> str:
        return f"file: {self._path}"

    async def acquire(self) -> str:
        """Read the document.

        Raises:
            FileInputError: If the file is missing, unreadable or not
                valid text in the configured encoding
        """
        log.debug(LogEventNames.INPUT_READING, source="file", path=str(self._path))

        try:
            text = await run_blocking(self._read)
        except FileNotFoundError as e:
            raise FileInputError(
                f"File not found: {self._path}",
                hint=f"Ensure the file '{self._path}' exists and the path is correct.",
            ) from e
        except IsADirectoryError as e:
            raise FileInputError(
                f"Path is a directory, not a file: {self._path}",
                hint="Pass the markdown file itself with -i/--input.",
            ) from e
        except UnicodeDecodeError as e:
            raise FileInputError(
                f"Could not decode {self._path} as {self._encoding}: {e.reason}",
                hint="Set MD_APPLY_ENCODING to the file's encoding.",
            ) from e
        except OSError as e:
            raise FileInputError(f"Could not read {self._path}: {e.strerror or e}") from e

        log.info(LogEventNames.INPUT_READ, source="file", length=len(text))
        return text

    def _read(self) -> str:
        # utf-8-sig drops a leading BOM
        encoding = self._encoding
        if codecs.lookup(encoding).name == "utf-8":
            encoding = "utf-8-sig"
        with self._path.open(encoding=encoding, newline="") as f:
            return f.read()
