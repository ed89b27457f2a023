"""
Log Sink Protocol

The external observer that receives the real-time feed of an agent run:
every decoded stream event at info severity and every stderr chunk at error
severity. In the MCP server the sink is the client session
(``notifications/message``); on the command line it is the structured log.
"""

from enum import Enum
from typing import Protocol


class LogSeverity(str, Enum):
    """Severity attached to a forwarded payload."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogSinkProtocol(Protocol):
    """Accepts ``(severity, payload)`` pairs. No acknowledgment is expected."""

    async def send(self, severity: LogSeverity, payload: str) -> None:
        """Deliver one payload."""
        ...
