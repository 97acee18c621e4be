"""Revert executor that undoes an apply batch.

This module implements the RevertExecutor class. Using only the snapshots
captured before the batch was written, it:
- Restores files that existed and were readable
- Deletes files the batch created
- Leaves files that existed but could not be read (their content is unknown)
- Prunes now-empty directories the batch created, deepest first
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import PurePath

import structlog

from md_apply.interfaces.filesystem import FileSystem
from md_apply.models.results import (
    RevertAction,
    RevertFileOutcome,
    RevertResult,
    WriteOperation,
    WriteResult,
)
from md_apply.utils.async_helpers import gather_keyed
from md_apply.utils.logging import LogEventNames

log = structlog.get_logger()


class RevertExecutor:
    """Restores the filesystem to its pre-apply state.

    Example:
        executor = RevertExecutor(fs)
        outcome = await executor.revert(
            apply_result.successful_results,
            apply_result.original_states,
        )
        if not outcome.success:
            ...
    """

    def __init__(self, fs: FileSystem, encoding: str = "utf-8") -> None:
        """Initialize the RevertExecutor.

        Args:
            fs: Filesystem the batch was written through
            encoding: Text encoding for restored files
        """
        self._fs = fs
        self._encoding = encoding

    async def revert(
        self,
        successful_results: Sequence[WriteResult],
        original_states: Sequence[WriteOperation],
    ) -> RevertResult:
        """Undo every successful write.

        Per-file failures are logged and recorded but never stop the other
        files. Directory cleanup failures are informational only.

        Args:
            successful_results: Results of the writes to undo
            original_states: Snapshots taken before the batch

        Returns:
            RevertResult; ``success`` is True only if every file ended up in
            a well-defined pre-apply state
        """
        # First snapshot per path is the pre-batch state
        snapshots: dict[str, WriteOperation] = {}
        for state in original_states:
            snapshots.setdefault(state.file_path, state)

        # Blocks sharing a path produce one revert
        unique_results: dict[str, WriteResult] = {}
        for result in successful_results:
            if result.success:
                unique_results.setdefault(result.file_path, result)

        async def revert_one(result: WriteResult) -> RevertFileOutcome:
            return await self._revert_file(result.file_path, snapshots.get(result.file_path))

        outcomes = await gather_keyed(
            unique_results.values(),
            key=lambda result: result.file_path,
            worker=revert_one,
        )
        files = tuple(outcomes[path] for path in unique_results)

        candidates: set[str] = set()
        for path, outcome in zip(unique_results, files, strict=True):
            if outcome.action is RevertAction.DELETED:
                candidates.update(self._cleanup_candidates(successful_results, path))
        removed = await self._prune_directories(candidates)

        success = all(
            outcome.action in (RevertAction.RESTORED, RevertAction.DELETED) for outcome in files
        )
        return RevertResult(success=success, files=files, removed_directories=removed)

    async def _revert_file(self, path: str, snapshot: WriteOperation | None) -> RevertFileOutcome:
        """Restore or delete a single file according to its snapshot."""
        if snapshot is None:
            log.error(LogEventNames.REVERT_MISSING_SNAPSHOT, path=path)
            return RevertFileOutcome(
                file_path=path,
                action=RevertAction.ERROR,
                error="No original state was captured for this file",
            )

        if snapshot.originally_existed and snapshot.original_content is None:
            log.warning(LogEventNames.FILE_KEPT, path=path)
            return RevertFileOutcome(
                file_path=path,
                action=RevertAction.KEPT,
                error="Original content could not be read before writing; new content kept",
            )

        try:
            if snapshot.original_content is not None:
                await self._fs.write_text(path, snapshot.original_content, self._encoding)
                log.debug(LogEventNames.FILE_RESTORED, path=path)
                return RevertFileOutcome(file_path=path, action=RevertAction.RESTORED)

            try:
                await self._fs.delete_file(path)
            except FileNotFoundError:
                log.debug("file_already_gone", path=path)
            log.debug(LogEventNames.FILE_DELETED, path=path)
            return RevertFileOutcome(file_path=path, action=RevertAction.DELETED)
        except OSError as e:
            log.error(LogEventNames.REVERT_FILE_ERROR, path=path, error=str(e))
            return RevertFileOutcome(file_path=path, action=RevertAction.ERROR, error=str(e))

    def _cleanup_candidates(self, results: Iterable[WriteResult], path: str) -> set[str]:
        """Directories created for ``path`` that lie below the working root."""
        created: set[str] = set()
        for result in results:
            if result.file_path == path:
                created.update(result.created_directories)

        root = self._fs.root
        return {d for d in created if self._is_below_root(self._fs.resolve(d), root)}

    @staticmethod
    def _is_below_root(directory: PurePath, root: PurePath) -> bool:
        """True if ``directory`` is strictly inside ``root``."""
        return directory != root and directory.is_relative_to(root)

    async def _prune_directories(self, candidates: set[str]) -> tuple[str, ...]:
        """Remove empty candidate directories, deepest first."""
        removed: list[str] = []
        ordered = sorted(candidates, key=lambda d: len(self._fs.resolve(d).parts), reverse=True)

        for directory in ordered:
            try:
                if not await self._fs.is_directory(directory):
                    continue
                if await self._fs.list_directory(directory):
                    log.info(LogEventNames.DIRECTORY_KEPT, path=directory, reason="not_empty")
                    continue
                await self._fs.remove_empty_directory(directory)
            except FileNotFoundError:
                continue
            except OSError as e:
                log.info(LogEventNames.DIRECTORY_REMOVE_ERROR, path=directory, error=str(e))
                continue

            log.debug(LogEventNames.DIRECTORY_REMOVED, path=directory)
            removed.append(directory)

        return tuple(removed)
