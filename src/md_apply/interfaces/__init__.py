"""Protocol definitions for pluggable collaborators."""

from .filesystem import FileSystem
from .io import Console, InputSource
from .lint import LintRunner

__all__ = ["Console", "FileSystem", "InputSource", "LintRunner"]
