"""
Unit tests for stream event parsing

Tests parse_stream_event including:
- The three known event types
- Unknown event types
- Malformed lines
- Field coercion
"""

import dataclasses

import pytest

from gemini_cli_mcp.core.domain.stream_events import (
    InitEvent,
    MessageEvent,
    ResultEvent,
    StreamStats,
    UnknownEvent,
    parse_stream_event,
)


class TestKnownEvents:
    """Decoding of init, message and result records."""

    def test_init_event(self):
        line = '{"type":"init","session_id":"s-1","timestamp":"2025-01-01T00:00:00Z","model":"gemini-2.5-pro"}'
        event = parse_stream_event(line)
        assert isinstance(event, InitEvent)
        assert event.type == "init"
        assert event.session_id == "s-1"
        assert event.timestamp == "2025-01-01T00:00:00Z"
        assert event.model == "gemini-2.5-pro"
        assert event.raw == line

    def test_message_event(self):
        event = parse_stream_event(
            '{"type":"message","role":"assistant","content":"Hi","delta":true}'
        )
        assert isinstance(event, MessageEvent)
        assert event.role == "assistant"
        assert event.content == "Hi"
        assert event.delta is True

    def test_message_delta_defaults_to_false(self):
        event = parse_stream_event('{"type":"message","role":"user","content":"q"}')
        assert isinstance(event, MessageEvent)
        assert event.delta is False

    def test_result_event_with_stats(self):
        event = parse_stream_event(
            '{"type":"result","status":"success","total_cost_usd":0.0125,'
            '"stats":{"total_tokens":120,"input_tokens":100,"output_tokens":20,'
            '"duration_ms":3400,"tool_calls":2}}'
        )
        assert isinstance(event, ResultEvent)
        assert event.status == "success"
        assert event.total_cost_usd == 0.0125
        assert event.stats == StreamStats(
            total_tokens=120,
            input_tokens=100,
            output_tokens=20,
            duration_ms=3400,
            tool_calls=2,
        )

    def test_result_event_without_optional_fields(self):
        event = parse_stream_event('{"type":"result"}')
        assert isinstance(event, ResultEvent)
        assert event.stats is None
        assert event.total_cost_usd is None

    def test_raw_is_stripped_line(self):
        event = parse_stream_event('  {"type":"init"}\r')
        assert event is not None
        assert event.raw == '{"type":"init"}'


class TestUnknownEvents:
    def test_unknown_type_is_kept(self):
        event = parse_stream_event('{"type":"tool_use","tool_name":"read_file"}')
        assert isinstance(event, UnknownEvent)
        assert event.type == "tool_use"
        assert event.payload["tool_name"] == "read_file"


class TestMalformedLines:
    @pytest.mark.parametrize(
        "line",
        [
            "",
            "   ",
            "not json",
            '{"type":"init"',
            "[1, 2, 3]",
            '"just a string"',
            "42",
            '{"session_id":"no-type"}',
            '{"type":7}',
        ],
    )
    def test_returns_none(self, line):
        assert parse_stream_event(line) is None


class TestCoercion:
    def test_non_string_fields_are_absent(self):
        event = parse_stream_event('{"type":"message","role":1,"content":{"a":1}}')
        assert isinstance(event, MessageEvent)
        assert event.role is None
        assert event.content is None

    @pytest.mark.parametrize("cost", ["-1", "true", '"0.5"', "null"])
    def test_invalid_cost_is_absent(self, cost):
        event = parse_stream_event('{"type":"result","total_cost_usd":%s}' % cost)
        assert isinstance(event, ResultEvent)
        assert event.total_cost_usd is None

    def test_zero_cost_is_kept(self):
        event = parse_stream_event('{"type":"result","total_cost_usd":0}')
        assert isinstance(event, ResultEvent)
        assert event.total_cost_usd == 0

    def test_non_integer_stats_are_absent(self):
        event = parse_stream_event(
            '{"type":"result","stats":{"total_tokens":"many","tool_calls":true,"duration_ms":12}}'
        )
        assert isinstance(event, ResultEvent)
        assert event.stats == StreamStats(duration_ms=12)


class TestImmutability:
    def test_events_are_frozen(self):
        event = parse_stream_event('{"type":"init","session_id":"s-1"}')
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.session_id = "other"  # type: ignore[misc]
