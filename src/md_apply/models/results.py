"""Data models for write, revert and lint outcomes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .blocks import CodeBlock


@dataclass(frozen=True)
class WriteOperation:
    """Snapshot of a target path taken before any write in the batch.

    ``original_content`` is None both when the file did not exist and when it
    existed but could not be read; ``originally_existed`` tells them apart.
    """

    block: CodeBlock
    original_content: str | None
    originally_existed: bool

    @property
    def file_path(self) -> str:
        """Target path of the snapshotted block."""
        return self.block.file_path


@dataclass(frozen=True)
class WriteResult:
    """Outcome of writing one block."""

    file_path: str
    success: bool
    error: Exception | None = None
    lines_added: int = 0
    lines_deleted: int = 0
    created_directories: tuple[str, ...] = ()  # Deepest first

    @property
    def error_message(self) -> str | None:
        """Human readable error text, if the write failed."""
        return str(self.error) if self.error is not None else None


@dataclass(frozen=True)
class ProcessingStats:
    """Aggregate counts for one batch of writes."""

    total_attempted: int
    successful_writes: int
    failed_writes: int
    total_lines_added: int
    total_lines_deleted: int
    duration_ms: float

    @classmethod
    def from_results(cls, results: Iterable[WriteResult], duration_ms: float) -> ProcessingStats:
        """Fold write results into batch statistics."""
        attempted = succeeded = added = deleted = 0
        for result in results:
            attempted += 1
            if result.success:
                succeeded += 1
            added += result.lines_added
            deleted += result.lines_deleted

        return cls(
            total_attempted=attempted,
            successful_writes=succeeded,
            failed_writes=attempted - succeeded,
            total_lines_added=added,
            total_lines_deleted=deleted,
            duration_ms=duration_ms,
        )


@dataclass(frozen=True)
class ApplyResult:
    """Full transaction record of one apply batch."""

    write_results: tuple[WriteResult, ...]
    original_states: tuple[WriteOperation, ...]
    stats: ProcessingStats

    @property
    def successful_results(self) -> tuple[WriteResult, ...]:
        """Results of the writes that went through."""
        return tuple(r for r in self.write_results if r.success)

    @property
    def failed_results(self) -> tuple[WriteResult, ...]:
        """Results of the writes that failed."""
        return tuple(r for r in self.write_results if not r.success)


class RevertAction(Enum):
    """What revert did to a single file."""

    RESTORED = "restored"
    DELETED = "deleted"
    KEPT = "kept"  # Existed but was unreadable; new content left in place
    ERROR = "error"


@dataclass(frozen=True)
class RevertFileOutcome:
    """Revert outcome for one file."""

    file_path: str
    action: RevertAction
    error: str | None = None


@dataclass(frozen=True)
class RevertResult:
    """Outcome of reverting a batch."""

    success: bool
    files: tuple[RevertFileOutcome, ...] = ()
    removed_directories: tuple[str, ...] = ()


@dataclass(frozen=True)
class LintCounts:
    """Error and warning counts reported by an external checker."""

    error_count: int
    warning_count: int


@dataclass(frozen=True)
class LintComparison:
    """Before/after lint counts around an apply."""

    before: LintCounts | None
    after: LintCounts | None

    @property
    def available(self) -> bool:
        """True if both sides of the comparison ran."""
        return self.before is not None and self.after is not None

    @property
    def error_delta(self) -> int | None:
        """Change in error count, or None without data."""
        if self.before is None or self.after is None:
            return None
        return self.after.error_count - self.before.error_count

    @property
    def warning_delta(self) -> int | None:
        """Change in warning count, or None without data."""
        if self.before is None or self.after is None:
            return None
        return self.after.warning_count - self.before.warning_count
