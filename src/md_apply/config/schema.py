"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LintConfig(BaseModel):
    """External lint/type-check configuration."""

    enabled: bool = False
    command: list[str] = ["mypy", "."]
    timeout: int = Field(300, ge=1, le=3600, description="Checker timeout in seconds")

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        """Require an executable name."""
        if not v or not v[0].strip():
            raise ValueError("Lint command must name an executable")
        return v


class ClipboardConfig(BaseModel):
    """Clipboard input configuration."""

    command: list[str] | None = None
    timeout: int = Field(10, ge=1, le=120)

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str] | None) -> list[str] | None:
        """Reject an empty override; None means auto-detect."""
        if v is not None and (not v or not v[0].strip()):
            raise ValueError("Clipboard command must name an executable")
        return v


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("md-apply.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class ApplyConfig(BaseSettings):
    """Root configuration for md-apply.

    Every field can be set from the environment, e.g. ``MD_APPLY_AUTO_YES=1``
    or ``MD_APPLY_LINT__ENABLED=true``.
    """

    encoding: str = "utf-8"
    auto_yes: bool = False
    root: Path | None = None
    lint: LintConfig = LintConfig()
    clipboard: ClipboardConfig = ClipboardConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="MD_APPLY_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Require a codec Python knows about."""
        import codecs

        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v

    @property
    def working_root(self) -> Path:
        """Directory relative block paths resolve against."""
        return self.root if self.root is not None else Path.cwd()
