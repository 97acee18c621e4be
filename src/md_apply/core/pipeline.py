"""Apply pipeline orchestrator.

This module implements the ApplyPipeline class that sequences one run:
1. Optional lint run (before)
2. Acquire the markdown input
3. Analyze it and report issues
4. Write every valid block (snapshotting first)
5. Report per-file results and the batch summary
6. Optional lint run (after) and comparison
7. Confirm with the operator, or auto-accept
8. Revert when the operator declines
9. Classify the run (RunStatus) for the exit status

The pipeline only sequences and keeps status; parsing lives in the
analyzer and undo logic in the revert executor. It never exits the
process: the caller maps the returned outcome to an exit status.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog

from md_apply.core.analyzer import ContentAnalyzer
from md_apply.core.reporting import (
    format_analysis_issues,
    format_final_status,
    format_lint_comparison,
    format_revert_result,
    format_write_results,
)
from md_apply.core.reverter import RevertExecutor
from md_apply.core.writer import WriteExecutor
from md_apply.models.outcome import PipelineOutcome, RunStatus
from md_apply.models.results import LintComparison, LintCounts
from md_apply.utils.async_helpers import InputError
from md_apply.utils.logging import LogEventNames, run_context

if TYPE_CHECKING:
    from md_apply.interfaces.filesystem import FileSystem
    from md_apply.interfaces.io import Console, InputSource
    from md_apply.interfaces.lint import LintRunner
    from md_apply.models.blocks import AnalysisResult
    from md_apply.models.results import ApplyResult

log = structlog.get_logger()

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})
CONFIRM_PROMPT = "Keep these changes? [y/N] "


def is_affirmative(answer: str | None) -> bool:
    """True only for an explicit yes (``y``/``yes``, any case, trimmed)."""
    return answer is not None and answer.strip().lower() in AFFIRMATIVE_ANSWERS


class ApplyPipeline:
    """Runs the plan, execute, optionally undo sequence once.

    Example:
        pipeline = ApplyPipeline(
            fs=LocalFileSystem(Path.cwd()),
            input_source=FileInputSource(Path("changes.md")),
            console=TerminalConsole(),
        )
        outcome = await pipeline.run()
        sys.exit(outcome.exit_code)
    """

    def __init__(
        self,
        fs: FileSystem,
        input_source: InputSource,
        console: Console,
        lint_runner: LintRunner | None = None,
        encoding: str = "utf-8",
        auto_yes: bool = False,
        analyzer: ContentAnalyzer | None = None,
    ) -> None:
        """Initialize the ApplyPipeline.

        Args:
            fs: Filesystem blocks are written to
            input_source: Where the markdown document comes from
            console: Operator output and prompting
            lint_runner: External checker; None disables lint comparison
            encoding: Text encoding for target files
            auto_yes: Keep changes without asking
            analyzer: Content analyzer (default instance if None)
        """
        self._fs = fs
        self._input = input_source
        self._console = console
        self._lint = lint_runner
        self._auto_yes = auto_yes
        self._analyzer = analyzer or ContentAnalyzer()
        self._writer = WriteExecutor(fs, encoding)
        self._reverter = RevertExecutor(fs, encoding)

    async def run(self) -> PipelineOutcome:
        """Run the pipeline to a final outcome.

        Input failures and unexpected exceptions are converted to an
        outcome rather than raised.

        Returns:
            PipelineOutcome classifying the run
        """
        with run_context(run_id=uuid.uuid4().hex[:8]):
            log.info(LogEventNames.RUN_STARTED, source=self._input.description)

            try:
                outcome = await self._run()
            except InputError as e:
                log.error(LogEventNames.INPUT_ERROR, error=str(e))
                self._console.status(f"Failed to read from {self._input.description}: {e}")
                if e.hint:
                    self._console.status(f"Hint: {e.hint}")
                outcome = PipelineOutcome(status=RunStatus.INPUT_ERROR, error=str(e))
            except Exception as e:
                log.exception(LogEventNames.RUN_ERROR, error=str(e))
                outcome = PipelineOutcome(status=RunStatus.UNEXPECTED_ERROR, error=str(e))

            if outcome.status is not RunStatus.INPUT_ERROR:
                self._console.status(format_final_status(outcome))
            log.info(LogEventNames.RUN_FINISHED, status=outcome.status.value)
            return outcome

    async def _run(self) -> PipelineOutcome:
        """Sequence the stages; see the module docstring."""
        lint_before = await self._run_lint("before")

        self._console.status(f"Reading from {self._input.description}...")
        text = await self._input.acquire()

        analysis = self._analyze(text)

        if not analysis.has_valid_blocks:
            if analysis.has_issues:
                self._console.status(
                    "No valid code blocks were extracted due to analysis issues."
                )
                return PipelineOutcome(status=RunStatus.ANALYSIS_FAILED, analysis=analysis)
            self._console.status("No valid code blocks found to apply.")
            return PipelineOutcome(status=RunStatus.NO_BLOCKS, analysis=analysis)

        block_count = len(analysis.valid_blocks)
        self._console.status(f"Applying changes for {block_count} valid code block(s)...")
        apply_result = await self._writer.write_all(analysis.valid_blocks)
        self._console.result(format_write_results(apply_result))

        if apply_result.stats.successful_writes == 0:
            return PipelineOutcome(
                status=RunStatus.WRITE_ERRORS,
                analysis=analysis,
                apply_result=apply_result,
            )

        lint = None
        if self._lint is not None:
            lint_after = await self._run_lint("after")
            lint = LintComparison(before=lint_before, after=lint_after)
            self._console.result(format_lint_comparison(lint))

        if await self._confirm():
            return PipelineOutcome(
                status=self._kept_status(analysis, apply_result),
                analysis=analysis,
                apply_result=apply_result,
                lint=lint,
            )

        self._console.status("Reverting changes...")
        revert_result = await self._reverter.revert(
            apply_result.successful_results,
            apply_result.original_states,
        )
        self._console.result(format_revert_result(revert_result))

        if revert_result.success:
            self._console.result("Changes reverted by user.")
            status = RunStatus.REVERTED
        else:
            status = RunStatus.REVERT_FAILED

        return PipelineOutcome(
            status=status,
            analysis=analysis,
            apply_result=apply_result,
            revert_result=revert_result,
            lint=lint,
        )

    def _analyze(self, text: str) -> AnalysisResult:
        """Analyze the document and report any issues."""
        self._console.status("Analyzing markdown content...")
        analysis = self._analyzer.analyze(text)

        if analysis.has_issues:
            self._console.status("\nAnalysis Issues Found:")
            for line in format_analysis_issues(analysis.issues):
                self._console.status(line)
            if analysis.has_valid_blocks:
                self._console.status("\nAttempting to process any valid blocks found...")
        else:
            self._console.status("No analysis issues found.")

        return analysis

    async def _run_lint(self, phase: str) -> LintCounts | None:
        """Run the optional checker; never fails the run."""
        if self._lint is None:
            return None

        self._console.status(f"Running lint check ({phase})...")
        try:
            counts = await self._lint.run()
        except Exception as e:
            log.warning(LogEventNames.LINT_UNAVAILABLE, phase=phase, error=str(e))
            counts = None

        if counts is None:
            self._console.status(f"Lint check ({phase}) unavailable.")
        return counts

    async def _confirm(self) -> bool:
        """Ask whether to keep the written changes."""
        if self._auto_yes:
            log.debug("confirmation_skipped", reason="auto_yes")
            return True

        answer = await self._console.prompt(CONFIRM_PROMPT)
        keep = is_affirmative(answer)
        log.info("confirmation_answered", keep=keep)
        return keep

    @staticmethod
    def _kept_status(analysis: AnalysisResult, apply_result: ApplyResult) -> RunStatus:
        """Status for a run whose changes were kept."""
        if analysis.has_issues:
            return RunStatus.FINISHED_WITH_ISSUES
        if apply_result.stats.failed_writes > 0:
            return RunStatus.WRITE_ERRORS
        return RunStatus.SUCCESS
