"""Data models for the final status of an apply run."""

from dataclasses import dataclass
from enum import Enum, IntEnum

from .blocks import AnalysisResult
from .results import ApplyResult, LintComparison, RevertResult


class ExitCode(IntEnum):
    """Process exit statuses."""

    SUCCESS = 0
    ERROR = 1
    INVALID_ARGS = 2


class RunStatus(Enum):
    """Final classification of an apply run."""

    SUCCESS = "success"
    NO_BLOCKS = "no_blocks"
    FINISHED_WITH_ISSUES = "finished_with_issues"
    WRITE_ERRORS = "write_errors"
    REVERTED = "reverted"
    REVERT_FAILED = "revert_failed"
    ANALYSIS_FAILED = "analysis_failed"
    INPUT_ERROR = "input_error"
    UNEXPECTED_ERROR = "unexpected_error"

    @property
    def exit_code(self) -> ExitCode:
        """Exit status for this classification."""
        if self in (RunStatus.SUCCESS, RunStatus.NO_BLOCKS, RunStatus.REVERTED):
            return ExitCode.SUCCESS
        return ExitCode.ERROR


@dataclass(frozen=True)
class PipelineOutcome:
    """Everything one run of the apply pipeline produced."""

    status: RunStatus
    analysis: AnalysisResult | None = None
    apply_result: ApplyResult | None = None
    revert_result: RevertResult | None = None
    lint: LintComparison | None = None
    error: str | None = None

    @property
    def exit_code(self) -> ExitCode:
        """Exit status derived from the run status."""
        return self.status.exit_code
