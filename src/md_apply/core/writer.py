"""Write executor that materializes code blocks on disk.

This module implements the WriteExecutor class. For each block it:
- Creates the parent directory chain (recording what it had to create)
- Reads any existing content to compute a line delta (an existing file
  that cannot be read fails the block and is left untouched)
- Replaces the file with the block content

The line delta is a line-count difference, not a diff: replacing three
lines with three different lines reports zero added and zero deleted.
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Sequence

import structlog

from md_apply.core.state_capture import capture_original_states
from md_apply.interfaces.filesystem import FileSystem
from md_apply.models.blocks import CodeBlock
from md_apply.models.results import ApplyResult, ProcessingStats, WriteResult
from md_apply.utils.async_helpers import gather_keyed
from md_apply.utils.logging import LogEventNames

log = structlog.get_logger()

# Parents that never need creating
_NO_PARENT = {"", ".", "/"}


def count_lines(text: str) -> int:
    """Number of lines in ``text``; an empty string has none."""
    return len(text.splitlines())


def line_delta(old_text: str, new_text: str) -> tuple[int, int]:
    """Approximate (added, deleted) line counts from line totals."""
    old_count = count_lines(old_text)
    new_count = count_lines(new_text)
    return max(0, new_count - old_count), max(0, old_count - new_count)


class WriteExecutor:
    """Writes code blocks through a FileSystem.

    Failures never escape: each one is reported in its WriteResult and the
    rest of the batch carries on.

    Example:
        executor = WriteExecutor(LocalFileSystem(Path.cwd()))
        apply_result = await executor.write_all(analysis.valid_blocks)
        print(apply_result.stats.successful_writes)
    """

    def __init__(self, fs: FileSystem, encoding: str = "utf-8") -> None:
        """Initialize the WriteExecutor.

        Args:
            fs: Filesystem to write through
            encoding: Text encoding for reads and writes
        """
        self._fs = fs
        self._encoding = encoding

    async def write(self, block: CodeBlock) -> WriteResult:
        """Write a single block.

        Args:
            block: Block to write

        Returns:
            WriteResult for the block
        """
        path = block.file_path
        created: tuple[str, ...] = ()

        try:
            created = await self._ensure_parent_directory(path)
            previous = await self._read_previous(path)
            await self._fs.write_text(path, block.file_content, self._encoding)
        except Exception as e:
            log.error(LogEventNames.FILE_WRITE_ERROR, path=path, error=str(e))
            return WriteResult(
                file_path=path,
                success=False,
                error=e,
                created_directories=created,
            )

        added, deleted = line_delta(previous, block.file_content)
        log.debug(LogEventNames.FILE_WRITTEN, path=path, lines_added=added, lines_deleted=deleted)

        return WriteResult(
            file_path=path,
            success=True,
            lines_added=added,
            lines_deleted=deleted,
            created_directories=created,
        )

    async def write_all(self, blocks: Sequence[CodeBlock]) -> ApplyResult:
        """Snapshot, then write, a whole batch of blocks.

        Distinct paths are written concurrently. Blocks that share a path
        are written one after another in document order so the last one
        wins deterministically.

        Args:
            blocks: Blocks to write, in document order

        Returns:
            ApplyResult with results in block order
        """
        start_time = time.perf_counter()

        original_states = await capture_original_states(self._fs, blocks, self._encoding)

        by_path: dict[str, list[int]] = defaultdict(list)
        for index, block in enumerate(blocks):
            by_path[block.file_path].append(index)

        async def write_group(indexes: list[int]) -> list[WriteResult]:
            return [await self.write(blocks[i]) for i in indexes]

        grouped = await gather_keyed(
            by_path.values(),
            key=lambda indexes: indexes[0],
            worker=write_group,
        )

        results: list[WriteResult | None] = [None] * len(blocks)
        for indexes in by_path.values():
            for index, result in zip(indexes, grouped[indexes[0]], strict=True):
                results[index] = result
        write_results = tuple(r for r in results if r is not None)

        duration_ms = (time.perf_counter() - start_time) * 1000
        stats = ProcessingStats.from_results(write_results, duration_ms)

        log.info(
            LogEventNames.BATCH_WRITTEN,
            attempted=stats.total_attempted,
            succeeded=stats.successful_writes,
            failed=stats.failed_writes,
            duration_ms=round(duration_ms, 2),
        )

        return ApplyResult(
            write_results=write_results,
            original_states=original_states,
            stats=stats,
        )

    async def _ensure_parent_directory(self, path: str) -> tuple[str, ...]:
        """Create the parent chain of ``path``.

        Returns:
            Directories that did not exist beforehand, deepest first
        """
        missing: list[str] = []
        current = self._fs.parent_of(path)

        while current not in _NO_PARENT and not await self._fs.path_exists(current):
            missing.append(current)
            parent = self._fs.parent_of(current)
            if parent == current:
                break
            current = parent

        if missing:
            await self._fs.make_directories(missing[0])

        return tuple(missing)

    async def _read_previous(self, path: str) -> str:
        """Existing content at ``path`` for the line delta.

        A missing file counts as empty. Any other read error propagates and
        fails the block, so content that could not be read is never replaced.
        """
        try:
            return await self._fs.read_text(path, self._encoding)
        except FileNotFoundError:
            return ""
