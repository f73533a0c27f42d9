"""Pydantic settings models for ssh-stat configuration."""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Any, Dict, Literal, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ssh_stat.exceptions import ConfigurationError
from ssh_stat.models import OrderBy, OutputFormat, parse_order_by
from ssh_stat.utils.durations import compose_duration, parse_duration


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads values from a YAML file.

    The YAML file path is determined by the CONFIG_PATH environment variable.
    """

    def get_field_value(
        self, field: Any, field_name: str
    ) -> Tuple[Any, str, bool]:
        """Get field value from YAML config."""
        yaml_config = self._load_yaml_config()
        field_value = yaml_config.get(field_name)
        return field_value, field_name, False

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load YAML configuration file."""
        config_path = os.environ.get("CONFIG_PATH")
        if not config_path:
            return {}

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (FileNotFoundError, yaml.YAMLError, PermissionError):
            # Errors will be handled by loader.py
            return {}

    def __call__(self) -> Dict[str, Any]:
        """Return the YAML config values."""
        return self._load_yaml_config()


class SshStatSettings(BaseSettings):
    """ssh-stat configuration settings.

    Configuration is loaded in the following precedence (highest to lowest):
    1. Constructor arguments (command line flags)
    2. Environment variables (SSHSTAT_ prefix)
    3. .env file
    4. YAML configuration file (via CONFIG_PATH)
    5. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="SSHSTAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Input
    input_path: str = Field(
        default="/var/log/auth.log",
        description="Auth log file to parse",
    )
    read_mode: Literal["full", "scan"] = Field(
        default="full",
        description="Read the whole file first (full) or scan it line by line (scan)",
    )

    # Time window
    after: str = Field(
        default="",
        description="Only keep events newer than this duration ago, e.g. 4d2h5m3s",
    )
    days: int = Field(default=0, ge=0, description="Start parsing at {n} days ago")
    hours: int = Field(default=0, ge=0, description="Start parsing at {n} hours ago")
    mins: int = Field(default=0, ge=0, description="Start parsing at {n} minutes ago")
    secs: int = Field(default=0, ge=0, description="Start parsing at {n} seconds ago")

    # Output
    order: str = Field(
        default=OrderBy.ATTEMPTS_DESC.value,
        description="Result order: attemptsAsc, attemptsDesc, chronoAsc, chronoDesc",
    )
    ips: bool = Field(default=False, description="Only display IP addresses")
    accepted: bool = Field(default=False, description="Only display accepted logins")
    failed: bool = Field(default=False, description="Only display failed logins")
    json_output: bool = Field(default=False, description="Display results as JSON")
    colors: bool = Field(
        default=False,
        description="Color the table columns when stdout is a terminal",
    )

    # Concurrency
    cpus: int = Field(
        default=0,
        description="CPUs to size the worker pool for (0 = all available)",
    )
    concurrency_per_cpu: int = Field(
        default=5,
        gt=0,
        description="Parse tasks allowed in flight per CPU",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format: json or text",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to set precedence.

        Order (first = highest priority):
        1. init_settings (command line flags)
        2. env_settings (environment variables with SSHSTAT_ prefix)
        3. dotenv_settings (.env file)
        4. yaml_settings (CONFIG_PATH YAML file)
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}
        normalized = v.upper()
        if normalized == "WARN":
            normalized = "WARNING"
        if normalized not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: DEBUG, INFO, WARNING, ERROR"
            )
        return normalized

    @field_validator("order")
    @classmethod
    def validate_order(cls, v: str) -> str:
        """Reject unknown order tokens before any parsing starts."""
        try:
            return parse_order_by(v.strip()).value
        except ConfigurationError as e:
            raise ValueError(e.message)

    @field_validator("after")
    @classmethod
    def validate_after(cls, v: str) -> str:
        """Validate the duration expression."""
        v = v.strip()
        try:
            parse_duration(v)
        except ConfigurationError as e:
            raise ValueError(e.message)
        return v

    @property
    def order_by(self) -> OrderBy:
        """Selected result order."""
        return OrderBy(self.order)

    @property
    def output_format(self) -> OutputFormat:
        """Selected report view. The IP list wins over JSON."""
        if self.ips:
            return OutputFormat.IPS
        if self.json_output:
            return OutputFormat.JSON
        return OutputFormat.TABLE

    @property
    def show_accepted(self) -> bool:
        """Whether accepted logins are shown (hidden by --failed alone)."""
        return self.accepted or not self.failed

    @property
    def show_failed(self) -> bool:
        """Whether failed logins are shown (hidden by --accepted alone)."""
        return self.failed or not self.accepted

    @property
    def duration(self) -> timedelta:
        """Lookback window, from ``after`` or the day/hour/min/sec fields."""
        expression = self.after or compose_duration(
            self.days, self.hours, self.mins, self.secs
        )
        return parse_duration(expression)

    @property
    def concurrency(self) -> int:
        """Parse tasks allowed in flight."""
        cpus = self.cpus if self.cpus >= 1 else (os.cpu_count() or 1)
        return self.concurrency_per_cpu * cpus
