"""md-apply: write path-annotated markdown code blocks to disk, with undo."""

from md_apply._version import __version__

__all__ = ["__version__"]
