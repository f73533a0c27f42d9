"""Log reading, parsing and dispatch for ssh-stat."""

from .dispatcher import Dispatcher
from .parser import EventParser, build_timestamp, parse_event, parse_month
from .reader import iter_lines, read_lines

__all__ = [
    # Dispatcher
    "Dispatcher",
    # Parser
    "EventParser",
    "build_timestamp",
    "parse_event",
    "parse_month",
    # Readers
    "iter_lines",
    "read_lines",
]
