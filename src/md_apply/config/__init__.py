"""Configuration loading and validation."""

from .loader import load_config, substitute_env_vars, validate_config
from .schema import (
    ApplyConfig,
    ClipboardConfig,
    FileLoggingConfig,
    LintConfig,
    LoggingConfig,
)

__all__ = [
    # Loader
    "load_config",
    "substitute_env_vars",
    "validate_config",
    # Root config
    "ApplyConfig",
    # Sections
    "LintConfig",
    "ClipboardConfig",
    "LoggingConfig",
    "FileLoggingConfig",
]
