"""Duration parsing and time-threshold utilities.

Durations are written the way the CLI accepts them: an optional leading
``<N>d`` for days, then hours/minutes/seconds such as ``2h5m3s``. Days are
folded into hours before parsing, so ``4d2h5m`` becomes ``98h5m``.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from dateutil import tz

from ssh_stat.exceptions import InvalidDurationError

DAYS_PATTERN = re.compile(r"^(\d+)d")
HOURS_PATTERN = re.compile(r"(\d+)h")
COMPONENT_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|h|m|s)")

# Zero duration means no lower time bound
BEGINNING_OF_TIME = datetime.min.replace(tzinfo=timezone.utc)

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def normalize_duration(expression: str) -> str:
    """Fold a leading ``<N>d`` into the hours component.

    Example:
        >>> normalize_duration("4d2h5m3s")
        '98h5m3s'
        >>> normalize_duration("1d")
        '24h'
    """
    days = DAYS_PATTERN.match(expression)
    if not days:
        return expression

    hours = int(days.group(1)) * 24
    rest = DAYS_PATTERN.sub("", expression, count=1)
    extra = HOURS_PATTERN.search(rest)
    if extra:
        hours += int(extra.group(1))
        rest = HOURS_PATTERN.sub("", rest, count=1)
    return f"{hours}h{rest}"


def parse_duration(expression: str) -> timedelta:
    """Parse a duration expression into a timedelta.

    An empty string or ``"0"`` is a zero duration.

    Raises:
        InvalidDurationError: If the expression is not a valid duration
    """
    normalized = normalize_duration(expression.strip())
    if normalized in ("", "0"):
        return timedelta(0)

    total = 0.0
    nonzero = False
    position = 0
    for component in COMPONENT_PATTERN.finditer(normalized):
        if component.start() != position:
            raise InvalidDurationError(expression)
        value = float(component.group(1))
        nonzero = nonzero or value > 0
        total += value * _UNIT_SECONDS[component.group(2)]
        position = component.end()
    if position != len(normalized):
        raise InvalidDurationError(expression)

    try:
        duration = timedelta(seconds=total)
    except OverflowError:
        raise InvalidDurationError(expression)

    # timedelta rounds to microseconds; a non-zero window must stay non-zero
    if nonzero and not duration:
        return timedelta(microseconds=1)
    return duration


def compose_duration(days: int = 0, hours: int = 0, mins: int = 0, secs: int = 0) -> str:
    """Build a ``{d}d{h}h{m}m{s}s`` expression from explicit components."""
    return f"{days}d{hours}h{mins}m{secs}s"


def resolve_threshold(duration: timedelta, now: Optional[datetime] = None) -> datetime:
    """Return the instant events must be strictly after to be kept.

    A zero duration resolves to BEGINNING_OF_TIME so every event is kept,
    never to "now".
    """
    if duration == timedelta(0):
        return BEGINNING_OF_TIME
    if now is None:
        now = datetime.now(tz.tzlocal())
    try:
        return now - duration
    except OverflowError:
        return BEGINNING_OF_TIME


def is_after(threshold: datetime) -> Callable[[datetime], bool]:
    """Build the time filter predicate for a threshold."""

    def predicate(timestamp: datetime) -> bool:
        return timestamp > threshold

    return predicate
