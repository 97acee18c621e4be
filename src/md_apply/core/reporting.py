"""Plain-text rendering of analysis, write, revert and lint outcomes."""

from __future__ import annotations

from collections.abc import Sequence

from md_apply.models.blocks import AnalysisIssue
from md_apply.models.outcome import PipelineOutcome, RunStatus
from md_apply.models.results import (
    ApplyResult,
    LintComparison,
    LintCounts,
    RevertAction,
    RevertResult,
    WriteResult,
)

_REVERT_LABELS = {
    RevertAction.RESTORED: "↺ Restored: ",
    RevertAction.DELETED: "- Deleted: ",
    RevertAction.KEPT: "! Kept: ",
    RevertAction.ERROR: "✗ Revert failed: ",
}


def format_analysis_issues(issues: Sequence[AnalysisIssue]) -> list[str]:
    """One entry per issue: location and message, then the offending line."""
    return [
        f"   [Line {issue.line_number}]: {issue.message}\n   {issue.line_content}"
        for issue in issues
    ]


def format_write_result(result: WriteResult) -> str:
    """Single line describing one write."""
    if result.success:
        return f"✔ Written: {result.file_path} (+{result.lines_added}, -{result.lines_deleted})"
    line = f"✗ Failed: {result.file_path}"
    if result.error is not None:
        line += f" ({result.error_message})"
    return line


def format_write_results(apply_result: ApplyResult) -> str:
    """Per-file lines followed by the batch summary."""
    stats = apply_result.stats
    lines = [format_write_result(result) for result in apply_result.write_results]
    lines.extend(
        [
            "",
            "Summary:",
            f"Attempted: {stats.total_attempted} file(s) "
            f"({stats.successful_writes} succeeded, {stats.failed_writes} failed)",
            f"Lines: +{stats.total_lines_added}, -{stats.total_lines_deleted}",
        ]
    )
    if stats.duration_ms > 0:
        lines.append(f"Completed in {stats.duration_ms:.2f}ms")
    return "\n".join(lines)


def format_revert_result(revert_result: RevertResult) -> str:
    """Per-file revert lines and removed directories."""
    lines = []
    for outcome in revert_result.files:
        line = f"{_REVERT_LABELS[outcome.action]}{outcome.file_path}"
        if outcome.error:
            line += f" ({outcome.error})"
        lines.append(line)
    for directory in revert_result.removed_directories:
        lines.append(f"- Removed directory: {directory}")
    return "\n".join(lines)


def format_lint_counts(counts: LintCounts | None) -> str:
    """Short description of one lint run."""
    if counts is None:
        return "unavailable"
    return f"{counts.error_count} error(s), {counts.warning_count} warning(s)"


def format_lint_comparison(comparison: LintComparison) -> str:
    """Before/after lint counts with deltas when both are known."""
    if comparison.before is None or comparison.after is None:
        return (
            "Lint comparison unavailable "
            f"(before: {format_lint_counts(comparison.before)}, "
            f"after: {format_lint_counts(comparison.after)})"
        )
    return (
        f"Lint errors: {comparison.before.error_count} -> {comparison.after.error_count} "
        f"({comparison.error_delta:+d}), "
        f"warnings: {comparison.before.warning_count} -> {comparison.after.warning_count} "
        f"({comparison.warning_delta:+d})"
    )


def format_final_status(outcome: PipelineOutcome) -> str:
    """The one human readable line that closes a run."""
    issue_count = len(outcome.analysis.issues) if outcome.analysis else 0
    status = outcome.status

    if status is RunStatus.SUCCESS:
        return "Finished successfully."
    if status is RunStatus.NO_BLOCKS:
        return "Finished successfully. Nothing to apply."
    if status in (RunStatus.FINISHED_WITH_ISSUES, RunStatus.ANALYSIS_FAILED):
        return f"Finished with {issue_count} analysis issue(s)."
    if status is RunStatus.WRITE_ERRORS:
        return "Finished with write errors."
    if status is RunStatus.REVERTED:
        return "Changes reverted successfully."
    if status is RunStatus.REVERT_FAILED:
        return "Revert finished with errors. Some files could not be restored."
    if status is RunStatus.INPUT_ERROR:
        return f"Failed to read input: {outcome.error}"
    return f"Unexpected error: {outcome.error}"
