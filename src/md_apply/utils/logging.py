"""Structured logging for md-apply.

Diagnostics go to stderr (and optionally a file) so they never mix with
the apply report on stdout. Every event carries the service name and
version; events emitted inside ``run_context`` also carry the run id.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog

from md_apply._version import __version__

SERVICE_NAME = "md-apply"


class LogFormat(StrEnum):
    """Log output format options."""

    JSON = "json"
    CONSOLE = "console"


class LogLevel(StrEnum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def add_service_fields(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Tag an event with the service name and version."""
    event_dict["service"] = SERVICE_NAME
    event_dict["version"] = __version__
    return event_dict


def _renderer(log_format: LogFormat) -> Any:
    if log_format is LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=False, exception_formatter=structlog.dev.plain_traceback
    )


def configure_logging(
    level: LogLevel | str = LogLevel.WARNING,
    log_format: LogFormat | str = LogFormat.CONSOLE,
    file_path: Path | str | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structlog and the stdlib handlers it renders through.

    Args:
        level: Minimum level to emit
        log_format: ``json`` for machine readable lines, ``console`` otherwise
        file_path: Log file, used only when ``file_enabled``
        file_enabled: Also write diagnostics to ``file_path``

    Example:
        configure_logging(level="DEBUG")
        configure_logging(level="INFO", log_format="json")
    """
    level = LogLevel(level.upper()) if isinstance(level, str) else level
    log_format = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format
    numeric_level = getattr(logging, level.value)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service_fields,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(log_format),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: OSError | None = None

    if file_enabled and file_path:
        file_path = Path(file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(file_path))
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setLevel(numeric_level)

    logging.basicConfig(format="%(message)s", level=numeric_level, handlers=handlers, force=True)

    if file_error is not None:
        structlog.get_logger().warning(
            "log_file_unavailable", path=str(file_path), error=str(file_error)
        )


@contextmanager
def run_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to every event logged inside the block.

    The fields are unbound on exit, including when the block is cancelled
    or interrupted.

    Example:
        with run_context(run_id="3f2a"):
            log.info("analysis_complete")  # includes run_id
    """
    with structlog.contextvars.bound_contextvars(**fields):
        yield


class LogEventNames:
    """Event names used across md-apply."""

    # Run lifecycle
    RUN_STARTED = "apply_run_started"
    RUN_FINISHED = "apply_run_finished"
    RUN_ERROR = "apply_run_error"

    # Input
    INPUT_READING = "input_reading"
    INPUT_READ = "input_read"
    INPUT_ERROR = "input_error"

    # Analysis
    ANALYSIS_COMPLETE = "analysis_complete"
    ANALYSIS_ISSUE = "analysis_issue"

    # Capture and write
    STATE_CAPTURED = "original_state_captured"
    STATE_UNREADABLE = "original_state_unreadable"
    FILE_WRITTEN = "file_written"
    FILE_WRITE_ERROR = "file_write_error"
    BATCH_WRITTEN = "batch_written"

    # Revert
    FILE_RESTORED = "file_restored"
    FILE_DELETED = "file_deleted"
    FILE_KEPT = "file_kept_unrecoverable"
    REVERT_MISSING_SNAPSHOT = "revert_missing_snapshot"
    REVERT_FILE_ERROR = "revert_file_error"
    DIRECTORY_REMOVED = "directory_removed"
    DIRECTORY_KEPT = "directory_kept"
    DIRECTORY_REMOVE_ERROR = "directory_remove_error"

    # Lint
    LINT_STARTED = "lint_started"
    LINT_COMPLETE = "lint_complete"
    LINT_UNAVAILABLE = "lint_unavailable"
