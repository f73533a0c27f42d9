"""LoginEvent model for one parsed sshd login line."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class LoginEvent(BaseModel):
    """One failed or accepted SSH login parsed from an auth log line.

    Syslog lines carry no year, so ``timestamp`` is always stamped with the
    current calendar year and local timezone. Events from December read in
    January therefore land in the future; this is a limitation of the log
    format and is not corrected here.

    Everything except ``attempts`` is fixed once parsed. ``attempts`` starts
    at 1 and is only changed by the Aggregator while merging.
    """

    timestamp: datetime = Field(..., description="When the login happened (current year assumed)")
    month: str = Field(..., description="Month token as written in the log, e.g. 'Jan'")
    day: str = Field(..., description="Day token as written in the log")
    hms: str = Field(..., description="Time of day as HH:MM:SS")
    server: str = Field(..., description="Host that wrote the log line")
    auth_method: str = Field(..., description="Authentication method, e.g. 'password'")
    user: str = Field(..., description="Requested username (unwrapped if invalid)")
    ip: str = Field(..., description="Source IP address")
    port: int = Field(..., ge=0, le=99999, description="Source port")
    protocol: str = Field(..., description="Protocol token, e.g. 'ssh2'")
    invalid_user: bool = Field(default=False, description="sshd flagged the user as invalid")
    authenticated: bool = Field(..., description="True for Accepted, False for Failed")
    attempts: int = Field(default=1, ge=1, description="Attempts recorded for this source IP")

    def row(self) -> List[str]:
        """Return display cells for the table view.

        Column order: Date, Ip, Attempts, User, Auth, Protocol, Port, Server.
        """
        ts = self.timestamp
        return [
            f"{ts.month}/{ts.day}/{ts.year}",
            self.ip,
            str(self.attempts),
            self.user,
            self.auth_method,
            self.protocol,
            str(self.port),
            self.server,
        ]
