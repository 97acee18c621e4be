"""Data models and transfer objects."""

from .blocks import AnalysisIssue, AnalysisResult, CodeBlock
from .outcome import ExitCode, PipelineOutcome, RunStatus
from .results import (
    ApplyResult,
    LintComparison,
    LintCounts,
    ProcessingStats,
    RevertAction,
    RevertFileOutcome,
    RevertResult,
    WriteOperation,
    WriteResult,
)

__all__ = [
    # Analysis models
    "CodeBlock",
    "AnalysisIssue",
    "AnalysisResult",
    # Write models
    "WriteOperation",
    "WriteResult",
    "ProcessingStats",
    "ApplyResult",
    # Revert models
    "RevertAction",
    "RevertFileOutcome",
    "RevertResult",
    # Lint models
    "LintCounts",
    "LintComparison",
    # Run outcome
    "ExitCode",
    "RunStatus",
    "PipelineOutcome",
]
