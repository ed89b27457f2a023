"""
Stream Events emitted by the Gemini CLI

The Gemini CLI, when invoked with ``--output-format stream-json``, writes one
JSON object per line to stdout. Each record carries a ``type`` discriminator:

- init: session started (session id, timestamp, model)
- message: a user or assistant content fragment
- result: run finished (status, statistics, total cost)

Any other ``type`` is still a valid event; it is kept as ``UnknownEvent`` so
that it can be forwarded to the log feed, and is otherwise ignored.

Events are immutable once decoded and retain the raw line they came from.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union


class StreamEventType(str, Enum):
    """Known values of the ``type`` field."""

    INIT = "init"
    MESSAGE = "message"
    RESULT = "result"


@dataclass(frozen=True)
class StreamStats:
    """
    Statistics reported by a ``result`` event.

    Attributes:
        total_tokens: Total tokens consumed by the run
        input_tokens: Prompt tokens
        output_tokens: Completion tokens
        duration_ms: Wall-clock duration reported by the agent
        tool_calls: Number of tool calls the agent made
    """

    total_tokens: Optional[int] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    duration_ms: Optional[int] = None
    tool_calls: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StreamStats":
        return cls(
            total_tokens=_int_or_none(data.get("total_tokens")),
            input_tokens=_int_or_none(data.get("input_tokens")),
            output_tokens=_int_or_none(data.get("output_tokens")),
            duration_ms=_int_or_none(data.get("duration_ms")),
            tool_calls=_int_or_none(data.get("tool_calls")),
        )


@dataclass(frozen=True)
class InitEvent:
    """Session start. ``session_id`` is the continuation token for later runs."""

    raw: str
    session_id: Optional[str] = None
    timestamp: Optional[str] = None
    model: Optional[str] = None
    type: str = field(default=StreamEventType.INIT.value, init=False)


@dataclass(frozen=True)
class MessageEvent:
    """
    A content fragment.

    Attributes:
        raw: Line the event was decoded from
        role: "assistant" or "user" (absent when not a string)
        content: Content fragment
        delta: True when the fragment continues the previous one
    """

    raw: str
    role: Optional[str] = None
    content: Optional[str] = None
    delta: bool = False
    type: str = field(default=StreamEventType.MESSAGE.value, init=False)


@dataclass(frozen=True)
class ResultEvent:
    """Run completion with optional statistics and total cost in USD."""

    raw: str
    status: Optional[str] = None
    stats: Optional[StreamStats] = None
    total_cost_usd: Optional[float] = None
    type: str = field(default=StreamEventType.RESULT.value, init=False)


@dataclass(frozen=True)
class UnknownEvent:
    """Event with an unrecognized ``type``. Forwarded, never folded."""

    raw: str
    type: str
    payload: Mapping[str, Any] = field(default_factory=dict)


StreamEvent = Union[InitEvent, MessageEvent, ResultEvent, UnknownEvent]


def stream_event_from_dict(data: Mapping[str, Any], raw: str) -> Optional[StreamEvent]:
    """
    Build a StreamEvent from a decoded JSON object.

    Args:
        data: Decoded JSON record
        raw: The line the record was parsed from

    Returns:
        The typed event, or None when the record has no string ``type``.
    """
    event_type = data.get("type")
    if not isinstance(event_type, str):
        return None

    if event_type == StreamEventType.INIT.value:
        return InitEvent(
            raw=raw,
            session_id=_str_or_none(data.get("session_id")),
            timestamp=_str_or_none(data.get("timestamp")),
            model=_str_or_none(data.get("model")),
        )
    if event_type == StreamEventType.MESSAGE.value:
        return MessageEvent(
            raw=raw,
            role=_str_or_none(data.get("role")),
            content=_str_or_none(data.get("content")),
            delta=data.get("delta") is True,
        )
    if event_type == StreamEventType.RESULT.value:
        stats = data.get("stats")
        return ResultEvent(
            raw=raw,
            status=_str_or_none(data.get("status")),
            stats=StreamStats.from_dict(stats) if isinstance(stats, dict) else None,
            total_cost_usd=_cost_or_none(data.get("total_cost_usd")),
        )
    return UnknownEvent(raw=raw, type=event_type, payload=dict(data))


def parse_stream_event(line: str) -> Optional[StreamEvent]:
    """
    Parse one line of ``stream-json`` output.

    Returns None for blank lines, invalid JSON, non-object records and
    records without a string ``type``.
    """
    text = line.strip()
    if not text:
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return stream_event_from_dict(data, raw=text)


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _cost_or_none(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value
