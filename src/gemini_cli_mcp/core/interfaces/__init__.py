"""
Core Protocol Interfaces

Protocols for the external collaborators of the agent runner. They keep the
core independent of the MCP transport and of the logging implementation.

Available Protocols:
    - LogSinkProtocol: Receiver of the real-time run log feed
    - LoggerProtocol: Structured logger
"""

from gemini_cli_mcp.core.interfaces.log_sink import LogSeverity, LogSinkProtocol
from gemini_cli_mcp.core.interfaces.logging import LoggerProtocol

__all__ = [
    "LogSeverity",
    "LogSinkProtocol",
    "LoggerProtocol",
]
