"""Configuration management for ssh-stat."""

from ssh_stat.config.loader import load_config
from ssh_stat.config.settings import SshStatSettings
from ssh_stat.exceptions import ConfigurationError

__all__ = [
    "ConfigurationError",
    "SshStatSettings",
    "load_config",
]
