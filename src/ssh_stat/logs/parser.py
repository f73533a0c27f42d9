"""sshd login line parser.

Recognizes the two auth.log shapes written by sshd for password and key
logins:

    Jan 05 10:00:00 host sshd[123]: Failed password for invalid user root from 10.0.0.1 port 2222 ssh2
    Jan 05 10:00:09 host sshd[123]: Accepted publickey for deploy from 10.0.0.2 port 50122 ssh2
"""

import re
from datetime import datetime
from typing import Optional, Tuple

import structlog
from dateutil import tz

from ssh_stat.exceptions import MalformedFieldError, ParseMismatchError
from ssh_stat.models import LoginEvent

logger = structlog.get_logger(__name__)

MONTHS: Tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

_LOGIN_TEMPLATE = (
    r"(?P<month>\w{{3}})\s+(?P<day>\d{{1,2}})\s(?P<hms>\d{{2}}:\d{{2}}:\d{{2}})\s"
    r"(?P<server>[\w.-]+)\ssshd\[\d+\]:\s{result}\s(?P<method>[\w-]+)\sfor\s"
    r"(?P<user>[\w\s.@-]+?)\sfrom\s(?P<ip>[\d.]+)\sport\s(?P<port>\d{{1,5}})\s"
    r"(?P<protocol>\w+)"
)

FAILED_PATTERN = re.compile(_LOGIN_TEMPLATE.format(result="Failed"))
ACCEPTED_PATTERN = re.compile(_LOGIN_TEMPLATE.format(result="Accepted"))
INVALID_USER_PATTERN = re.compile(r"^invalid\suser\s*([\w.@-]*)$")


def parse_month(month: str) -> int:
    """Return the 1-based month number for a 3-letter month name.

    Raises:
        MalformedFieldError: If the name is not one of the 12 months.
    """
    try:
        return MONTHS.index(month.lower()) + 1
    except ValueError:
        raise MalformedFieldError("month", month)


def build_timestamp(
    month: str,
    day: str,
    hms: str,
    now: Optional[datetime] = None,
) -> datetime:
    """Rebuild a timestamp from syslog month/day/time tokens.

    Syslog omits the year, so the year of ``now`` (default: the current
    local time) is used along with the local timezone.

    Raises:
        MalformedFieldError: If any component is out of range.
    """
    if now is None:
        now = datetime.now(tz.tzlocal())
    month_num = parse_month(month)
    try:
        hour, minute, second = (int(part) for part in hms.split(":"))
        return datetime(
            now.year, month_num, int(day), hour, minute, second,
            tzinfo=now.tzinfo or tz.tzlocal(),
        )
    except ValueError:
        raise MalformedFieldError("date", f"{month} {day} {hms}")


def parse_event(line: str, now: Optional[datetime] = None) -> LoginEvent:
    """Parse one auth.log line into a LoginEvent.

    Args:
        line: Raw log line
        now: Reference time used for the year (defaults to now)

    Returns:
        LoginEvent with attempts=1

    Raises:
        ParseMismatchError: If the line is neither a Failed nor an Accepted login
        MalformedFieldError: If the line matched but its date is unusable
    """
    match = FAILED_PATTERN.search(line)
    authenticated = False
    if match is None:
        match = ACCEPTED_PATTERN.search(line)
        authenticated = True
    if match is None:
        raise ParseMismatchError(line)

    groups = match.groupdict()
    user = groups["user"]
    invalid_user = False
    invalid = INVALID_USER_PATTERN.search(user)
    if invalid:
        invalid_user = True
        user = invalid.group(1)

    return LoginEvent(
        timestamp=build_timestamp(groups["month"], groups["day"], groups["hms"], now=now),
        month=groups["month"],
        day=groups["day"],
        hms=groups["hms"],
        server=groups["server"],
        auth_method=groups["method"],
        user=user,
        ip=groups["ip"],
        port=int(groups["port"]),
        protocol=groups["protocol"],
        invalid_user=invalid_user,
        authenticated=authenticated,
        attempts=1,
    )


class EventParser:
    """Parser turning auth.log lines into LoginEvents.

    Lines that are not sshd login events are expected and common, so they
    are reported as None rather than raised. Malformed login lines still
    raise MalformedFieldError so the caller can count them.

    Example:
        >>> parser = EventParser()
        >>> event = parser.parse(
        ...     "Jan 05 10:00:00 host sshd[123]: Failed password for root from 10.0.0.1 port 22 ssh2"
        ... )
        >>> event.ip
        '10.0.0.1'
    """

    def __init__(self, now: Optional[datetime] = None) -> None:
        """Initialize the parser.

        Args:
            now: Fixed reference time for the year. If None, the current
                time is read on every parse.
        """
        self._now = now

    def parse(self, line: str) -> Optional[LoginEvent]:
        """Parse a line, returning None when it is not a login event.

        Raises:
            MalformedFieldError: If the line matched but a field is unusable
        """
        try:
            return parse_event(line, now=self._now)
        except ParseMismatchError:
            return None
