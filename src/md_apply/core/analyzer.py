"""Analyzer for path-annotated fenced code blocks in markdown.

This module implements a single-pass, lenient line scanner that turns a
markdown document into writable code blocks. It supports:
- Path on the fence line: ```lang // path/to/file
- Path on the line after a bare fence: ```lang, then // path/to/file
- Indented fences (indentation inside the block is preserved)
- LF and CRLF line endings, and a leading byte-order mark

Malformed blocks (no path, unclosed fence) become AnalysisIssue entries and
never stop the other blocks from being extracted.

Known limitation: fences cannot be nested. Every line that starts with
three backticks toggles the scanner, so a fence written as literal content
inside a block closes that block early.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

import structlog

from md_apply.models.blocks import AnalysisIssue, AnalysisResult, CodeBlock
from md_apply.utils.logging import LogEventNames

log = structlog.get_logger()

FENCE_MARKER = "```"
BYTE_ORDER_MARK = "\ufeff"

MISSING_PATH_MESSAGE = (
    "Invalid code block start tag format: no file path found. Expected "
    "```[lang] // path/to/file.ext or a '// path/to/file.ext' line directly "
    "after the opening fence."
)
UNCLOSED_BLOCK_MESSAGE = (
    "Unclosed code block: found an odd number of '```' delimiters. "
    "Blocks may be incomplete or incorrectly matched."
)


class ScanState(Enum):
    """Where the scanner is relative to fenced blocks."""

    OUTSIDE_BLOCK = "outside_block"
    INSIDE_BLOCK = "inside_block"


@dataclass
class _OpenBlock:
    """Scratch state for the block currently being scanned."""

    start_index: int
    start_line: str
    file_path: str | None
    content_start: int


class ContentAnalyzer:
    """Extracts code blocks and analysis issues from markdown text.

    The analyzer is pure: no I/O, no exceptions for malformed input.

    Example:
        analyzer = ContentAnalyzer()
        result = analyzer.analyze(markdown)
        for block in result.valid_blocks:
            print(block.file_path)
    """

    LINE_SPLIT_PATTERN = re.compile(r"\r?\n")
    # Whole (trimmed) fence line: fence, optional bare language tag, // path
    SAME_LINE_PATH_PATTERN = re.compile(
        r"^```(?:[\w+#.-]+)?\s*//\s*(?P<path>[^\r\n]+?)\s*$",
    )
    # Whole (trimmed) line after a bare fence: // path
    NEXT_LINE_PATH_PATTERN = re.compile(r"^//\s*(?P<path>[^\r\n]+?)\s*$")

    def analyze(self, markdown_text: str) -> AnalysisResult:
        """Scan a markdown document for path-annotated code blocks.

        Args:
            markdown_text: Full document text

        Returns:
            AnalysisResult with blocks in document order and issues in
            detection order
        """
        if markdown_text.startswith(BYTE_ORDER_MARK):
            markdown_text = markdown_text[len(BYTE_ORDER_MARK) :]

        lines = self.LINE_SPLIT_PATTERN.split(markdown_text)
        blocks: list[CodeBlock] = []
        issues: list[AnalysisIssue] = []

        state = ScanState.OUTSIDE_BLOCK
        current: _OpenBlock | None = None

        for index, line in enumerate(lines):
            if not self.is_fence(line):
                continue

            if state is ScanState.OUTSIDE_BLOCK or current is None:
                current = self._open_block(lines, index)
                state = ScanState.INSIDE_BLOCK
                continue

            if current.file_path is not None:
                blocks.append(
                    CodeBlock(
                        file_path=current.file_path,
                        file_content="\n".join(lines[current.content_start : index]),
                        start_line_number=current.start_index + 1,
                    )
                )
            else:
                issues.append(
                    AnalysisIssue(
                        line_number=current.start_index + 1,
                        line_content=current.start_line,
                        message=MISSING_PATH_MESSAGE,
                    )
                )
            current = None
            state = ScanState.OUTSIDE_BLOCK

        if state is ScanState.INSIDE_BLOCK and current is not None:
            issues.append(
                AnalysisIssue(
                    line_number=current.start_index + 1,
                    line_content=current.start_line,
                    message=UNCLOSED_BLOCK_MESSAGE,
                )
            )

        for issue in issues:
            log.debug(LogEventNames.ANALYSIS_ISSUE, line=issue.line_number, message=issue.message)
        log.info(
            LogEventNames.ANALYSIS_COMPLETE,
            lines=len(lines),
            valid_blocks=len(blocks),
            issues=len(issues),
        )

        return AnalysisResult(valid_blocks=tuple(blocks), issues=tuple(issues))

    @staticmethod
    def is_fence(line: str) -> bool:
        """Check if a line is a fence delimiter (leading whitespace ignored)."""
        return line.lstrip().startswith(FENCE_MARKER)

    def extract_fence_path(self, line: str) -> str | None:
        """Return the path written on a fence line itself, if any."""
        match = self.SAME_LINE_PATH_PATTERN.match(line.strip())
        if not match:
            return None
        return match.group("path").strip() or None

    def extract_comment_path(self, line: str) -> str | None:
        """Return the path of a ``// path`` line, if the line is exactly that."""
        match = self.NEXT_LINE_PATH_PATTERN.match(line.strip())
        if not match:
            return None
        return match.group("path").strip() or None

    def _open_block(self, lines: list[str], index: int) -> _OpenBlock:
        """Resolve the path for the fence at ``index``."""
        fence_line = lines[index]

        path = self.extract_fence_path(fence_line)
        if path is not None:
            return _OpenBlock(index, fence_line, path, index + 1)

        if index + 1 < len(lines):
            path = self.extract_comment_path(lines[index + 1])
            if path is not None:
                return _OpenBlock(index, fence_line, path, index + 2)

        return _OpenBlock(index, fence_line, None, index + 1)


_default_analyzer = ContentAnalyzer()


def analyze_markdown(markdown_text: str) -> AnalysisResult:
    """Analyze a markdown document with the default analyzer."""
    return _default_analyzer.analyze(markdown_text)
