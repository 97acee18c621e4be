"""Data models for markdown code-block analysis."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CodeBlock:
    """A validated fenced block with a resolved target path."""

    file_path: str
    file_content: str  # Exact text between the fence lines, joined with "\n"
    start_line_number: int  # 1-based line of the opening fence


@dataclass(frozen=True)
class AnalysisIssue:
    """A recoverable defect found while scanning the document."""

    line_number: int
    line_content: str
    message: str


@dataclass(frozen=True)
class AnalysisResult:
    """Output of the content analyzer."""

    valid_blocks: tuple[CodeBlock, ...]
    issues: tuple[AnalysisIssue, ...]

    @property
    def has_issues(self) -> bool:
        """True if any analysis issue was reported."""
        return bool(self.issues)

    @property
    def has_valid_blocks(self) -> bool:
        """True if at least one block can be written."""
        return bool(self.valid_blocks)
