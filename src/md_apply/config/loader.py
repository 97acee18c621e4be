"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from .schema import ApplyConfig


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path | None = None) -> ApplyConfig:
    """
    Load configuration from an optional YAML file and the environment.

    Values in the file take precedence; anything it leaves out falls back
    to ``MD_APPLY_*`` environment variables, then to defaults.

    Args:
        path: Path to YAML configuration file, or None for environment only

    Returns:
        Validated ApplyConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    config_dict: dict[str, Any] = {}

    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with path.open(encoding="utf-8") as f:
            raw_yaml = f.read()

        # Substitute environment variables
        yaml_with_env = substitute_env_vars(raw_yaml)

        # Parse YAML; an empty file means no overrides
        loaded = yaml.safe_load(yaml_with_env)
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration file must contain a mapping: {path}")
            config_dict = loaded

    # Constructing the settings model keeps environment variables in play
    config = ApplyConfig(**config_dict)

    # Additional cross-field validation
    validate_config(config)

    return config


def validate_config(config: ApplyConfig) -> None:
    """
    Perform additional cross-field validation.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If the configuration is inconsistent
    """
    if config.root is not None and not config.root.is_dir():
        raise ValueError(f"Working root is not a directory: {config.root}")

    if config.logging.file.enabled and config.logging.file.path.is_dir():
        raise ValueError(f"Log file path is a directory: {config.logging.file.path}")
