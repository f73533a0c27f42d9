"""Shared enumerations for the ssh-stat models."""

from enum import Enum


class OrderBy(str, Enum):
    """Sort order applied to the result buckets."""

    ATTEMPTS_DESC = "attemptsDesc"
    ATTEMPTS_ASC = "attemptsAsc"
    CHRONO_DESC = "chronoDesc"
    CHRONO_ASC = "chronoAsc"


class OutputFormat(str, Enum):
    """Report view rendered to stdout."""

    TABLE = "table"
    IPS = "ips"
    JSON = "json"


class ErrorKind(str, Enum):
    """Category of an ssh-stat error."""

    PARSE_MISMATCH = "parse_mismatch"
    MALFORMED_FIELD = "malformed_field"
    CONFIG_ERROR = "config_error"
    ALREADY_RUN = "already_run"
    IO_FAILURE = "io_failure"


def parse_order_by(expression: str) -> OrderBy:
    """Map an order token such as ``attemptsDesc`` to an OrderBy.

    Raises:
        ConfigurationError: If the token is not one of the four known orders.
    """
    try:
        return OrderBy(expression)
    except ValueError:
        # Import here to avoid a circular import with ssh_stat.exceptions
        from ssh_stat.exceptions import ConfigurationError

        valid = ", ".join(o.value for o in OrderBy)
        raise ConfigurationError(
            message=f"Order expression could not be interpreted: {expression!r}",
            hint=f"Valid orders: {valid}",
        )
