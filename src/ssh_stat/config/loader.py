"""Configuration loading with YAML and environment override support."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ssh_stat.config.settings import SshStatSettings
from ssh_stat.exceptions import ConfigurationError


def load_yaml_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file if specified.

    Args:
        config_path: Path to YAML config file. If None, checks CONFIG_PATH env var.

    Returns:
        Dict of configuration values from YAML, or empty dict if no file.
    """
    path = config_path or os.environ.get("CONFIG_PATH")

    if not path:
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            hint="Point CONFIG_PATH or --config at a valid YAML file, or drop it to use flags only.",
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}")
    except PermissionError:
        raise ConfigurationError(f"Cannot read configuration file {path}: permission denied")


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[str]:
    """Format Pydantic validation errors into user-friendly messages."""
    messages: List[str] = []
    for error in errors:
        loc = ".".join(str(part) for part in error.get("loc", []))
        msg = error.get("msg", "Invalid value")
        input_val = error.get("input")

        # Pydantic prefixes messages from ValueError with "Value error, "
        msg = msg.removeprefix("Value error, ")
        if input_val is not None:
            messages.append(f"'{loc}' {msg}, got: {input_val}")
        else:
            messages.append(f"'{loc}' {msg}")

    return messages


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SshStatSettings:
    """Load and validate configuration.

    Configuration is loaded with the following precedence:
    1. Overrides (command line flags)
    2. Environment variables
    3. YAML configuration file
    4. Default values (lowest priority)

    Args:
        config_path: Optional path to YAML config file (sets CONFIG_PATH env).
        overrides: Values that win over every other source.

    Returns:
        Validated SshStatSettings instance.

    Raises:
        ConfigurationError: If the file cannot be read or validation fails.
    """
    # Set CONFIG_PATH if provided directly
    if config_path:
        os.environ["CONFIG_PATH"] = config_path

    # Validate YAML file exists and is readable (gives better errors)
    # The actual loading happens in the pydantic settings source
    _ = load_yaml_config()

    try:
        config = SshStatSettings(**(overrides or {}))
    except ValidationError as e:
        # Report every problem at once
        error_messages = format_validation_errors(e.errors())
        raise ConfigurationError("Invalid configuration:\n  " + "\n  ".join(error_messages))

    return config
