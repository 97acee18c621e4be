"""Utility functions and helpers.

This module provides various utilities for md-apply:
- async_helpers: Exceptions, keyed fan-out
- safe_subprocess: Safe external command execution
- logging: Structured logging configuration
"""

from md_apply.utils.async_helpers import (
    ApplyError,
    ClipboardError,
    FileInputError,
    InputError,
    gather_keyed,
    run_blocking,
)
from md_apply.utils.logging import (
    LogEventNames,
    LogFormat,
    LogLevel,
    configure_logging,
    run_context,
)
from md_apply.utils.safe_subprocess import (
    CommandError,
    CommandNotFoundError,
    CommandResult,
    CommandTimeoutError,
    SafeCommandRunner,
)

__all__ = [
    # Errors
    "ApplyError",
    "ClipboardError",
    "CommandError",
    "CommandNotFoundError",
    "CommandResult",
    "CommandTimeoutError",
    "FileInputError",
    "InputError",
    # Logging
    "LogEventNames",
    "LogFormat",
    "LogLevel",
    # Subprocess
    "SafeCommandRunner",
    "configure_logging",
    "gather_keyed",
    "run_blocking",
    "run_context",
]
