"""Concrete implementations of the capability interfaces."""

from .console.terminal import TerminalConsole
from .filesystem.local import LocalFileSystem
from .input.clipboard import ClipboardInputSource, detect_paste_command
from .input.file import FileInputSource
from .lint.external import SubprocessLintRunner, count_diagnostics

__all__ = [
    "ClipboardInputSource",
    "FileInputSource",
    "LocalFileSystem",
    "SubprocessLintRunner",
    "TerminalConsole",
    "count_diagnostics",
    "detect_paste_command",
]
