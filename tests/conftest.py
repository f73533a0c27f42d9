"""Shared fixtures for ssh-stat tests."""

import os

import pytest
import structlog


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """Keep config env vars and structlog configuration out of other tests."""
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    for key in list(os.environ):
        if key.startswith("SSHSTAT_"):
            monkeypatch.delenv(key, raising=False)
    yield
    structlog.reset_defaults()


def _make_line(
    result: str = "Failed",
    ip: str = "1.2.3.4",
    user: str = "root",
    month: str = "Jan",
    day: str = "05",
    hms: str = "10:00:00",
    port: int = 2222,
    method: str = "password",
    host: str = "host",
) -> str:
    """Build an sshd auth.log login line."""
    return (
        f"{month} {day} {hms} {host} sshd[123]: {result} {method} for {user} "
        f"from {ip} port {port} ssh2"
    )


@pytest.fixture
def make_line():
    """Factory for sshd login lines."""
    return _make_line

