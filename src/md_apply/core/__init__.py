"""Core apply logic.

This module contains the main pieces of md-apply:
- ContentAnalyzer: Extracts path-annotated code blocks from markdown
- WriteExecutor: Writes blocks and reports per-file results
- RevertExecutor: Undoes a batch from its snapshots
- ApplyPipeline: Sequences a whole run
"""

from md_apply.core.analyzer import ContentAnalyzer, analyze_markdown
from md_apply.core.pipeline import ApplyPipeline, is_affirmative
from md_apply.core.reverter import RevertExecutor
from md_apply.core.state_capture import capture_original_state, capture_original_states
from md_apply.core.writer import WriteExecutor, line_delta

__all__ = [
    "ApplyPipeline",
    "ContentAnalyzer",
    "RevertExecutor",
    "WriteExecutor",
    "analyze_markdown",
    "capture_original_state",
    "capture_original_states",
    "is_affirmative",
    "line_delta",
]
