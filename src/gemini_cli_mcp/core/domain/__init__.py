"""
Domain Models and Business Logic

This package contains the core domain models for gemini-cli-mcp:
- Stream events decoded from the Gemini CLI output
- The session accumulator and the task outcome
- Configuration schema
- Domain errors
"""

from gemini_cli_mcp.core.domain.accumulator import SessionAccumulator
from gemini_cli_mcp.core.domain.models import TaskOutcome
from gemini_cli_mcp.core.domain.stream_events import (
    InitEvent,
    MessageEvent,
    ResultEvent,
    StreamEvent,
    StreamStats,
    UnknownEvent,
    parse_stream_event,
)

__all__ = [
    "SessionAccumulator",
    "TaskOutcome",
    "InitEvent",
    "MessageEvent",
    "ResultEvent",
    "StreamEvent",
    "StreamStats",
    "UnknownEvent",
    "parse_stream_event",
]
