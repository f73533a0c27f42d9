"""Custom exceptions for ssh-stat.

All exceptions inherit from SshStatError for consistent error handling.
Each one carries an ErrorKind so callers can tell parse problems apart
from configuration, reuse and I/O failures.
"""

from typing import Optional

from ssh_stat.models.enums import ErrorKind


class SshStatError(Exception):
    """Base exception for all ssh-stat errors.

    Attributes:
        message: Human-readable error message.
        hint: Optional troubleshooting hint.
        exit_code: Suggested exit code for the CLI.
        kind: Error category.
    """

    exit_code: int = 1
    kind: ErrorKind = ErrorKind.CONFIG_ERROR

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        self.message = message
        self.hint = hint
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional hint."""
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


class ParseMismatchError(SshStatError):
    """Line matches neither the failed nor the accepted login shape.

    Unrelated lines are common in auth logs, so this is normally
    swallowed by the parser and never reaches the user.
    """

    kind = ErrorKind.PARSE_MISMATCH

    def __init__(self, line: str) -> None:
        super().__init__(message=f"Line is not an sshd login event: {line[:100]}")


class MalformedFieldError(SshStatError):
    """A login line matched but one of its fields is unusable.

    Typical causes are an unknown month abbreviation or an impossible
    day/time such as ``Feb 30`` or ``25:00:00``.
    """

    kind = ErrorKind.MALFORMED_FIELD

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(message=f"Malformed {field}: {value!r}")


class ConfigurationError(SshStatError):
    """Raised when configuration is invalid or cannot be loaded."""

    exit_code: int = 1
    kind = ErrorKind.CONFIG_ERROR


class InvalidDurationError(ConfigurationError):
    """Duration expression could not be parsed."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        super().__init__(
            message=f"Invalid duration: {expression!r}",
            hint="Use a form like 4d2h5m3s, 90m or 30s.",
        )


class AlreadyRunError(SshStatError):
    """Dispatcher.run() was called on an instance that already ran."""

    kind = ErrorKind.ALREADY_RUN

    def __init__(self) -> None:
        super().__init__(
            message="Dispatcher has already run",
            hint="Create a new Dispatcher for each batch of lines.",
        )


class InputReadError(SshStatError):
    """The input log could not be opened or read."""

    exit_code: int = 2
    kind = ErrorKind.IO_FAILURE

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(
            message=f"Cannot read log file {path}: {reason}",
            hint="Check the --input path and that you can read it (auth.log usually needs root).",
        )
