"""Data models for ssh-stat."""

from .enums import ErrorKind, OrderBy, OutputFormat, parse_order_by
from .login_event import LoginEvent

__all__ = [
    "ErrorKind",
    "LoginEvent",
    "OrderBy",
    "OutputFormat",
    "parse_order_by",
]
