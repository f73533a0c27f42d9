"""Tests for the sshd login line parser."""

from datetime import datetime, timezone

import pytest

from ssh_stat.exceptions import MalformedFieldError, ParseMismatchError
from ssh_stat.logs import EventParser, build_timestamp, parse_event, parse_month
from ssh_stat.models import ErrorKind

INVALID_USER_LINE = (
    "Jan 05 10:00:00 host sshd[123]: Failed password for invalid user root "
    "from 10.0.0.1 port 2222 ssh2"
)
ACCEPTED_LINE = (
    "Mar 17 08:15:42 web01 sshd[4411]: Accepted publickey for deploy "
    "from 192.168.1.20 port 50122 ssh2"
)


class TestParseMonth:
    """Tests for parse_month lookup."""

    @pytest.mark.parametrize(
        "name,expected",
        [("Jan", 1), ("feb", 2), ("MAY", 5), ("Sep", 9), ("Dec", 12)],
    )
    def test_known_months(self, name: str, expected: int) -> None:
        """Month names are matched case-insensitively."""
        assert parse_month(name) == expected

    def test_unknown_month_raises(self) -> None:
        """Unknown month names are a hard failure."""
        with pytest.raises(MalformedFieldError) as exc_info:
            parse_month("Xyz")
        assert exc_info.value.field == "month"
        assert exc_info.value.kind == ErrorKind.MALFORMED_FIELD


class TestBuildTimestamp:
    """Tests for build_timestamp."""

    def test_uses_year_of_reference_time(self) -> None:
        """Syslog has no year, so the reference year is used."""
        now = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
        ts = build_timestamp("Jan", "05", "10:11:12", now=now)
        assert ts == datetime(2024, 1, 5, 10, 11, 12, tzinfo=timezone.utc)

    def test_defaults_to_current_year_local_time(self) -> None:
        """Without a reference, the current year and a local timezone are used."""
        ts = build_timestamp("Feb", "03", "04:05:06")
        assert ts.year == datetime.now().year
        assert ts.tzinfo is not None

    def test_impossible_day_raises(self) -> None:
        """Day out of range for the month is malformed."""
        now = datetime(2023, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(MalformedFieldError):
            build_timestamp("Feb", "30", "10:00:00", now=now)

    def test_impossible_time_raises(self) -> None:
        """Hour out of range is malformed."""
        with pytest.raises(MalformedFieldError):
            build_timestamp("Jan", "05", "25:00:00")


class TestParseEvent:
    """Tests for parse_event."""

    def test_failed_invalid_user(self) -> None:
        """Failed login for an invalid user is unwrapped and flagged."""
        event = parse_event(INVALID_USER_LINE)
        assert event.month == "Jan"
        assert event.day == "05"
        assert event.hms == "10:00:00"
        assert event.server == "host"
        assert event.auth_method == "password"
        assert event.user == "root"
        assert event.invalid_user is True
        assert event.authenticated is False
        assert event.ip == "10.0.0.1"
        assert event.port == 2222
        assert event.protocol == "ssh2"
        assert event.attempts == 1

    def test_invalid_user_with_empty_name(self) -> None:
        """sshd writes an empty invalid username as a double space."""
        line = (
            "Jan 05 10:00:00 host sshd[123]: Failed none for invalid user  "
            "from 10.0.0.1 port 2222 ssh2"
        )
        event = parse_event(line)
        assert event.invalid_user is True
        assert event.user == ""
        assert event.auth_method == "none"
        assert event.ip == "10.0.0.1"

    def test_username_containing_invalid_is_kept(self) -> None:
        """Only a leading "invalid user" marker is unwrapped."""
        line = (
            "Jan 05 10:00:00 host sshd[123]: Failed password for invalid.user "
            "from 10.0.0.1 port 2222 ssh2"
        )
        event = parse_event(line)
        assert event.invalid_user is False
        assert event.user == "invalid.user"

    def test_accepted_login(self) -> None:
        """Accepted lines set authenticated and keep the username as is."""
        event = parse_event(ACCEPTED_LINE)
        assert event.authenticated is True
        assert event.invalid_user is False
        assert event.user == "deploy"
        assert event.auth_method == "publickey"
        assert event.server == "web01"
        assert event.ip == "192.168.1.20"
        assert event.port == 50122
        assert event.timestamp.month == 3
        assert event.timestamp.day == 17
        assert (event.timestamp.hour, event.timestamp.minute, event.timestamp.second) == (8, 15, 42)

    def test_space_padded_day(self) -> None:
        """Syslog pads single-digit days with a space."""
        line = "Jan  5 10:00:00 host sshd[1]: Failed password for root from 1.2.3.4 port 22 ssh2"
        event = parse_event(line)
        assert event.day == "5"
        assert event.timestamp.day == 5

    def test_unrelated_line_raises_mismatch(self) -> None:
        """Lines that are not login events raise ParseMismatchError."""
        line = "Jan 05 10:00:00 host sshd[123]: Connection closed by 10.0.0.1 port 2222 [preauth]"
        with pytest.raises(ParseMismatchError) as exc_info:
            parse_event(line)
        assert exc_info.value.kind == ErrorKind.PARSE_MISMATCH

    def test_malformed_month_raises(self) -> None:
        """A matching line with an unknown month is malformed, not a mismatch."""
        line = INVALID_USER_LINE.replace("Jan", "Xyz", 1)
        with pytest.raises(MalformedFieldError):
            parse_event(line)

    def test_reparse_is_identical(self) -> None:
        """Parsing the same line twice yields equal events."""
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert parse_event(INVALID_USER_LINE, now=now) == parse_event(INVALID_USER_LINE, now=now)

    def test_prefixed_line_still_matches(self) -> None:
        """Extra prefix text (e.g. a file name from grep) does not prevent a match."""
        event = parse_event(f"auth.log:{ACCEPTED_LINE}")
        assert event.user == "deploy"


class TestEventParser:
    """Tests for the EventParser wrapper."""

    def setup_method(self) -> None:
        """Create parser instance for each test."""
        self.parser = EventParser(now=datetime(2024, 6, 1, tzinfo=timezone.utc))

    def test_no_match_returns_none(self) -> None:
        """Unrelated lines return None instead of raising."""
        assert self.parser.parse("Jan 05 10:00:00 host CRON[1]: session opened") is None

    def test_empty_line_returns_none(self) -> None:
        """Empty lines are not login events."""
        assert self.parser.parse("") is None

    def test_malformed_line_raises(self) -> None:
        """Malformed login lines still raise so they can be counted."""
        with pytest.raises(MalformedFieldError):
            self.parser.parse(INVALID_USER_LINE.replace("Jan", "Xyz", 1))

    def test_parse_uses_fixed_reference_year(self) -> None:
        """A fixed reference time pins the year."""
        event = self.parser.parse(ACCEPTED_LINE)
        assert event is not None
        assert event.timestamp.year == 2024

    def test_row_cells(self) -> None:
        """Table row follows the report column order."""
        event = self.parser.parse(INVALID_USER_LINE)
        assert event is not None
        assert event.row() == [
            "1/5/2024", "10.0.0.1", "1", "root", "password", "ssh2", "2222", "host",
        ]
