"""Entry point for the md-apply command.

This module provides the main entry point for md-apply.
It handles:
- Argument parsing
- Configuration loading
- Logging setup
- Adapter instantiation
- Mapping the run outcome to an exit status
"""

import argparse
import asyncio
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog

from md_apply._version import __version__
from md_apply.models.outcome import ExitCode

log = structlog.get_logger()


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from md_apply.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.WARNING
    fmt = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    configure_logging(
        level=level,
        log_format=fmt,
        file_path=file_path,
        file_enabled=file_enabled,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse (defaults to ``sys.argv[1:]``)

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="md-apply",
        description=(
            "Write the path-annotated code blocks of a markdown document to disk. "
            "Reads from the clipboard unless -i/--input is given."
        ),
        epilog="Blocks look like: ```python // src/app.py",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        metavar="FILE",
        help="Read markdown from FILE instead of the clipboard",
    )

    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Keep the changes without asking (also MD_APPLY_AUTO_YES=1)",
    )

    parser.add_argument(
        "--lint",
        action="store_true",
        help="Run the lint command before and after writing and compare counts",
    )

    parser.add_argument(
        "--lint-command",
        metavar="CMD",
        help='Lint command to run, e.g. "ruff check ." (default: mypy .)',
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default=None,
        help="Log output format (default: console)",
    )

    return parser.parse_args(argv)


async def run_apply(args: argparse.Namespace) -> int:
    """Build the collaborators and run one apply pipeline.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from md_apply.adapters import (
        ClipboardInputSource,
        FileInputSource,
        LocalFileSystem,
        SubprocessLintRunner,
        TerminalConsole,
    )
    from md_apply.config.loader import load_config
    from md_apply.core.pipeline import ApplyPipeline
    from md_apply.utils.logging import configure_logging

    console = TerminalConsole()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(args.config), error=str(e))
        console.status(f"Error: {e}")
        return ExitCode.ERROR
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        log.error("configuration_invalid", error=str(e))
        console.status(f"Error: invalid configuration: {e}")
        return ExitCode.ERROR

    # Reconfigure logging from config settings; CLI flags win
    configure_logging(
        level="DEBUG" if args.debug else config.logging.level,
        log_format=args.format or config.logging.format,
        file_path=config.logging.file.path if config.logging.file.enabled else None,
        file_enabled=config.logging.file.enabled,
    )

    root = config.working_root
    fs = LocalFileSystem(root)

    if args.input is not None:
        input_source = FileInputSource(args.input, encoding=config.encoding)
    else:
        input_source = ClipboardInputSource(
            command=config.clipboard.command,
            timeout=config.clipboard.timeout,
        )

    lint_runner = None
    if args.lint or args.lint_command or config.lint.enabled:
        command = shlex.split(args.lint_command) if args.lint_command else config.lint.command
        lint_runner = SubprocessLintRunner(command, timeout=config.lint.timeout, cwd=fs.root)

    pipeline = ApplyPipeline(
        fs=fs,
        input_source=input_source,
        console=console,
        lint_runner=lint_runner,
        encoding=config.encoding,
        auto_yes=args.yes or config.auto_yes,
    )

    log.info("starting_md_apply", version=__version__, root=str(fs.root))
    outcome = await pipeline.run()
    return outcome.exit_code


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Setup logging with CLI options
    setup_logging(
        debug=args.debug,
        log_format=args.format or "console",
    )

    try:
        return int(asyncio.run(run_apply(args)))
    except KeyboardInterrupt:
        log.info("interrupted")
        print("\nInterrupted.", file=sys.stderr)
        return int(ExitCode.ERROR)


if __name__ == "__main__":
    sys.exit(main())
