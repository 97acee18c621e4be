"""Tests for the logging configuration module."""

from pathlib import Path

import pytest
import structlog

from md_apply.utils.logging import (
    SERVICE_NAME,
    LogEventNames,
    LogFormat,
    LogLevel,
    add_service_fields,
    configure_logging,
    run_context,
)


class TestAddServiceFields:
    """Tests for the service field processor."""

    def test_adds_service_and_version(self) -> None:
        """Test that every event is tagged with the service name and version."""
        from md_apply._version import __version__

        result = add_service_fields(None, "info", {"event": "x"})  # type: ignore[arg-type]

        assert result["service"] == SERVICE_NAME == "md-apply"
        assert result["version"] == __version__
        assert result["event"] == "x"


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_with_console_format(self) -> None:
        """Test configuration with console format."""
        configure_logging(level=LogLevel.DEBUG, log_format=LogFormat.CONSOLE)
        # Should not raise

    def test_configure_with_json_format(self) -> None:
        """Test configuration with JSON format."""
        configure_logging(level=LogLevel.INFO, log_format=LogFormat.JSON)
        # Should not raise

    def test_configure_with_string_values(self) -> None:
        """Test configuration with lowercase string values."""
        configure_logging(level="warning", log_format="JSON")
        # Should not raise

    def test_configure_with_file_logging(self, tmp_path: Path) -> None:
        """Test that file logging writes events to the file."""
        log_file = tmp_path / "logs" / "md-apply.log"
        configure_logging(
            level=LogLevel.INFO,
            log_format=LogFormat.JSON,
            file_path=log_file,
            file_enabled=True,
        )

        structlog.get_logger("file_test").info("file_logging_works", answer=42)

        content = log_file.read_text()
        assert "file_logging_works" in content
        assert '"service": "md-apply"' in content

    def test_file_logging_disabled_without_flag(self, tmp_path: Path) -> None:
        """Test that a path alone does not enable file logging."""
        log_file = tmp_path / "unused.log"
        configure_logging(file_path=log_file, file_enabled=False)

        assert not log_file.exists()


class TestRunContext:
    """Tests for run_context."""

    def test_binds_inside_block(self) -> None:
        """Test that fields are visible inside the block and gone after it."""
        with run_context(run_id="abc123", source="clipboard"):
            assert structlog.contextvars.get_contextvars() == {
                "run_id": "abc123",
                "source": "clipboard",
            }
        assert structlog.contextvars.get_contextvars() == {}

    def test_unbinds_when_block_raises(self) -> None:
        """Test that an exception inside the block still unbinds the fields."""
        with pytest.raises(KeyboardInterrupt), run_context(run_id="abc123"):
            raise KeyboardInterrupt

        assert "run_id" not in structlog.contextvars.get_contextvars()

    def test_restores_outer_value(self) -> None:
        """Test that nesting restores the outer binding."""
        with run_context(run_id="outer"):
            with run_context(run_id="inner"):
                assert structlog.contextvars.get_contextvars()["run_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["run_id"] == "outer"


class TestEnums:
    """Tests for the logging enums and event names."""

    def test_log_levels(self) -> None:
        """Test that all expected log levels exist."""
        assert [level.value for level in LogLevel] == [
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
            "CRITICAL",
        ]

    def test_log_formats(self) -> None:
        """Test that all expected formats exist."""
        assert LogFormat.JSON.value == "json"
        assert LogFormat.CONSOLE.value == "console"

    def test_event_names_are_snake_case(self) -> None:
        """Test that event names follow the snake_case convention."""
        names = [v for k, v in vars(LogEventNames).items() if k.isupper()]
        assert names
        for name in names:
            assert name == name.lower()
            assert " " not in name
