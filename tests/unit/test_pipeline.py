"""Tests for the apply pipeline orchestrator."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog

from md_apply.adapters.filesystem.local import LocalFileSystem
from md_apply.core.pipeline import ApplyPipeline, is_affirmative
from md_apply.models.outcome import ExitCode, RunStatus
from md_apply.models.results import LintCounts
from md_apply.utils.async_helpers import FileInputError


def console_text(mock_method: MagicMock) -> str:
    """Join every message passed to a mocked console method."""
    return "\n".join(str(call.args[0]) for call in mock_method.call_args_list)


def make_pipeline(
    fs: LocalFileSystem,
    source: MagicMock,
    console: MagicMock,
    **kwargs: object,
) -> ApplyPipeline:
    """Create a pipeline with the given collaborators."""
    return ApplyPipeline(fs=fs, input_source=source, console=console, **kwargs)


class TestIsAffirmative:
    """Test confirmation answer parsing."""

    @pytest.mark.parametrize("answer", ["y", "Y", "yes", "YES", "  yes \n", "Yes"])
    def test_affirmative(self, answer: str) -> None:
        """Test answers that keep changes."""
        assert is_affirmative(answer) is True

    @pytest.mark.parametrize("answer", ["", "n", "no", "yep", "y es", "ok", None])
    def test_not_affirmative(self, answer: str | None) -> None:
        """Test answers that trigger a revert."""
        assert is_affirmative(answer) is False


class TestPipelineApply:
    """Test runs whose changes are kept."""

    @pytest.mark.asyncio
    async def test_success_with_confirmation(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
        sample_markdown: str,
    ) -> None:
        """Test a clean run where the operator answers yes."""
        markdown_input.acquire.return_value = sample_markdown

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.SUCCESS
        assert outcome.exit_code == ExitCode.SUCCESS
        assert (tmp_path / "src" / "app.py").read_text() == "def main():\n    return 1"
        assert (tmp_path / "docs" / "notes" / "readme.txt").read_text() == "hello"
        mock_console.prompt.assert_awaited_once()

        status = console_text(mock_console.status)
        assert "Reading from file: changes.md..." in status
        assert "Analyzing markdown content..." in status
        assert "No analysis issues found." in status
        assert "Applying changes for 2 valid code block(s)..." in status
        assert status.splitlines()[-1] == "Finished successfully."

        report = console_text(mock_console.result)
        assert "✔ Written: src/app.py" in report
        assert "Attempted: 2 file(s) (2 succeeded, 0 failed)" in report

    @pytest.mark.asyncio
    async def test_auto_yes_skips_prompt(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that automation mode never prompts."""
        markdown_input.acquire.return_value = "```// a.txt\nHELLO\n```"

        outcome = await make_pipeline(fs, markdown_input, mock_console, auto_yes=True).run()

        assert outcome.status is RunStatus.SUCCESS
        mock_console.prompt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_issues_with_valid_blocks_finish_with_issues(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that analysis issues force a non-success status when kept."""
        markdown_input.acquire.return_value = "```// a.txt\nA\n```\n```js\nno path\n```"

        outcome = await make_pipeline(fs, markdown_input, mock_console, auto_yes=True).run()

        assert outcome.status is RunStatus.FINISHED_WITH_ISSUES
        assert outcome.exit_code == ExitCode.ERROR
        assert (tmp_path / "a.txt").read_text() == "A"
        status = console_text(mock_console.status)
        assert "Analysis Issues Found:" in status
        assert "[Line 4]" in status
        assert "Attempting to process any valid blocks found..." in status
        assert "Finished with 1 analysis issue(s)." in status

    @pytest.mark.asyncio
    async def test_partial_write_failure(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that kept changes with a failed write exit with an error."""
        (tmp_path / "blocker").write_text("file")
        markdown_input.acquire.return_value = "```// ok.txt\nA\n```\n```// blocker/x.txt\nB\n```"

        outcome = await make_pipeline(fs, markdown_input, mock_console, auto_yes=True).run()

        assert outcome.status is RunStatus.WRITE_ERRORS
        assert outcome.exit_code == ExitCode.ERROR
        assert (tmp_path / "ok.txt").exists()
        assert "✗ Failed: blocker/x.txt" in console_text(mock_console.result)


class TestPipelineRevert:
    """Test runs the operator declines."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", ["n", "", "whatever"])
    async def test_decline_reverts(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
        answer: str,
    ) -> None:
        """Test that anything but yes restores the original tree."""
        (tmp_path / "existing.txt").write_text("before")
        markdown_input.acquire.return_value = (
            "```// existing.txt\nafter\n```\n```// fresh/new.txt\nnew\n```"
        )
        mock_console.prompt.return_value = answer

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.REVERTED
        assert outcome.exit_code == ExitCode.SUCCESS
        assert (tmp_path / "existing.txt").read_text() == "before"
        assert not (tmp_path / "fresh").exists()
        assert "Reverting changes..." in console_text(mock_console.status)
        assert "Changes reverted by user." in console_text(mock_console.result)

    @pytest.mark.asyncio
    async def test_clean_revert_overrides_analysis_issues(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that a fully honored discard exits successfully despite issues."""
        markdown_input.acquire.return_value = "```// a.txt\nA\n```\n```\nno path\n```"
        mock_console.prompt.return_value = "no"

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.REVERTED
        assert outcome.exit_code == ExitCode.SUCCESS

    @pytest.mark.asyncio
    async def test_incomplete_revert_is_an_error(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that a file the revert cannot remove fails the run."""
        markdown_input.acquire.return_value = "```// new.txt\ntext\n```"
        mock_console.prompt.return_value = "n"

        with patch.object(fs, "delete_file", AsyncMock(side_effect=PermissionError("denied"))):
            outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.REVERT_FAILED
        assert outcome.exit_code == ExitCode.ERROR
        assert outcome.revert_result is not None
        assert outcome.revert_result.success is False
        assert (tmp_path / "new.txt").exists()

    @pytest.mark.asyncio
    async def test_unreadable_target_left_untouched(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that an undecodable target fails its write and keeps its bytes."""
        original = b"\xff\xfe\x81binary"
        (tmp_path / "bin.dat").write_bytes(original)
        markdown_input.acquire.return_value = "```// bin.dat\ntext\n```"

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.WRITE_ERRORS
        assert outcome.exit_code == ExitCode.ERROR
        assert outcome.revert_result is None
        assert (tmp_path / "bin.dat").read_bytes() == original
        mock_console.prompt.assert_not_awaited()


class TestPipelineEarlyExits:
    """Test runs that stop before writing."""

    @pytest.mark.asyncio
    async def test_no_blocks_is_success(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test a document with nothing to apply."""
        markdown_input.acquire.return_value = "# Just prose\n"

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.NO_BLOCKS
        assert outcome.exit_code == ExitCode.SUCCESS
        assert "No valid code blocks found to apply." in console_text(mock_console.status)
        mock_console.prompt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_only_invalid_blocks_aborts(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that issues with zero valid blocks end in an error."""
        markdown_input.acquire.return_value = "```js\nconst x=1;\n```"

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.ANALYSIS_FAILED
        assert outcome.exit_code == ExitCode.ERROR
        assert list(tmp_path.iterdir()) == []
        assert "No valid code blocks were extracted due to analysis issues." in console_text(
            mock_console.status
        )

    @pytest.mark.asyncio
    async def test_all_writes_failed_skips_prompt(
        self,
        fs: LocalFileSystem,
        tmp_path: Path,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that nothing is confirmed when nothing was written."""
        (tmp_path / "blocker").write_text("file")
        markdown_input.acquire.return_value = "```// blocker/x.txt\nB\n```"

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.WRITE_ERRORS
        mock_console.prompt.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_input_error_with_hint(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that input failures are reported with their hint."""
        markdown_input.acquire.side_effect = FileInputError(
            "File not found: changes.md", hint="Ensure the file 'changes.md' exists"
        )

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.INPUT_ERROR
        assert outcome.exit_code == ExitCode.ERROR
        status = console_text(mock_console.status)
        assert "File not found: changes.md" in status
        assert "Hint: Ensure the file 'changes.md' exists" in status

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that a crash inside the run becomes an error outcome."""
        markdown_input.acquire.side_effect = RuntimeError("boom")

        outcome = await make_pipeline(fs, markdown_input, mock_console).run()

        assert outcome.status is RunStatus.UNEXPECTED_ERROR
        assert outcome.error == "boom"
        assert "Unexpected error: boom" in console_text(mock_console.status)


class TestPipelineLint:
    """Test the advisory lint comparison."""

    @pytest.mark.asyncio
    async def test_lint_before_and_after(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that counts are compared and reported."""
        markdown_input.acquire.return_value = "```// a.py\nx = 1\n```"
        lint = MagicMock()
        lint.run = AsyncMock(side_effect=[LintCounts(3, 1), LintCounts(1, 1)])

        outcome = await make_pipeline(
            fs, markdown_input, mock_console, lint_runner=lint, auto_yes=True
        ).run()

        assert outcome.status is RunStatus.SUCCESS
        assert outcome.lint is not None
        assert outcome.lint.error_delta == -2
        assert lint.run.await_count == 2
        assert "Lint errors: 3 -> 1 (-2)" in console_text(mock_console.result)

    @pytest.mark.asyncio
    async def test_lint_failure_is_not_fatal(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that a crashing checker degrades to no data."""
        markdown_input.acquire.return_value = "```// a.py\nx = 1\n```"
        lint = MagicMock()
        lint.run = AsyncMock(side_effect=RuntimeError("checker exploded"))

        outcome = await make_pipeline(
            fs, markdown_input, mock_console, lint_runner=lint, auto_yes=True
        ).run()

        assert outcome.status is RunStatus.SUCCESS
        assert outcome.lint is not None
        assert outcome.lint.available is False
        assert "Lint comparison unavailable" in console_text(mock_console.result)

    @pytest.mark.asyncio
    async def test_no_lint_runner(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that lint is skipped entirely without a runner."""
        markdown_input.acquire.return_value = "```// a.py\nx = 1\n```"

        outcome = await make_pipeline(fs, markdown_input, mock_console, auto_yes=True).run()

        assert outcome.lint is None
        assert "Lint" not in console_text(mock_console.result)


class TestPipelineLogContext:
    """Test the run id bound around each run."""

    @pytest.mark.asyncio
    async def test_run_id_bound_during_run(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that events inside a run carry a run id that is unbound afterwards."""
        seen: dict[str, object] = {}

        async def acquire() -> str:
            seen.update(structlog.contextvars.get_contextvars())
            return "# nothing\n"

        markdown_input.acquire.side_effect = acquire

        await make_pipeline(fs, markdown_input, mock_console).run()

        assert isinstance(seen.get("run_id"), str)
        assert "run_id" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_run_id_unbound_after_cancellation(
        self,
        fs: LocalFileSystem,
        markdown_input: MagicMock,
        mock_console: MagicMock,
    ) -> None:
        """Test that a cancelled run does not leak its run id."""
        markdown_input.acquire.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await make_pipeline(fs, markdown_input, mock_console).run()

        assert "run_id" not in structlog.contextvars.get_contextvars()
