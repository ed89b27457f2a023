"""Tests for LogForwarder and the log sinks."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import structlog
from structlog.testing import capture_logs

from gemini_cli_mcp.core.domain.stream_events import parse_stream_event
from gemini_cli_mcp.core.interfaces.log_sink import LogSeverity
from gemini_cli_mcp.infrastructure.logging.log_forwarder import LogForwarder, StructlogSink
from gemini_cli_mcp.infrastructure.logging.mcp_sink import McpSessionLogSink, level_rank


class TestLogForwarder:
    async def test_event_forwarded_at_info_with_raw_line(self, recording_sink):
        forwarder = LogForwarder(recording_sink)
        event = parse_stream_event('{"type":"init","session_id":"s"}')

        forwarder.forward_event(event)
        await forwarder.drain()

        assert recording_sink.records == [(LogSeverity.INFO, '{"type":"init","session_id":"s"}')]

    async def test_stderr_forwarded_at_error(self, recording_sink):
        forwarder = LogForwarder(recording_sink)

        forwarder.forward_stderr("boom\n")
        forwarder.forward_stderr("")
        await forwarder.drain()

        assert recording_sink.records == [(LogSeverity.ERROR, "boom\n")]

    async def test_forwarding_does_not_wait_for_sink(self):
        release = asyncio.Event()

        class SlowSink:
            async def send(self, severity, payload):
                await release.wait()

        forwarder = LogForwarder(SlowSink())
        forwarder.forward_stderr("x")
        assert forwarder.pending_count == 1

        await forwarder.drain(timeout=0.05)
        assert forwarder.pending_count == 1

        release.set()
        await forwarder.drain()
        assert forwarder.pending_count == 0

    async def test_sink_failure_is_logged(self, failing_sink):
        with capture_logs() as logs:
            forwarder = LogForwarder(failing_sink)
            forwarder.forward_stderr("x")
            await forwarder.drain()

        assert failing_sink.calls == 1
        assert any(entry["event"] == "log_forward_failed" for entry in logs)


class TestStructlogSink:
    async def test_severity_mapping(self):
        bound = MagicMock()
        sink = StructlogSink(bound)

        await sink.send(LogSeverity.INFO, '{"type":"init"}')
        await sink.send(LogSeverity.ERROR, "boom\n")

        bound.info.assert_called_once_with("agent_event", payload='{"type":"init"}')
        bound.error.assert_called_once_with("agent_stderr", payload="boom")

    async def test_default_logger(self):
        with capture_logs() as logs:
            await StructlogSink(structlog.get_logger()).send(LogSeverity.INFO, "line")
        assert logs[0]["payload"] == "line"


class TestMcpSessionLogSink:
    async def test_sends_log_notification(self):
        session = MagicMock()
        session.send_log_message = AsyncMock()
        sink = McpSessionLogSink(session, logger_name="gemini-cli-mcp", related_request_id=5)

        await sink.send(LogSeverity.ERROR, "boom")

        session.send_log_message.assert_awaited_once_with(
            level="error",
            data="boom",
            logger="gemini-cli-mcp",
            related_request_id=5,
        )

    async def test_respects_client_level(self):
        session = MagicMock()
        session.send_log_message = AsyncMock()
        sink = McpSessionLogSink(session, logger_name="x", min_level=lambda: "warning")

        await sink.send(LogSeverity.INFO, "dropped")
        await sink.send(LogSeverity.ERROR, "kept")

        assert session.send_log_message.await_count == 1
        assert session.send_log_message.await_args.kwargs["data"] == "kept"

    def test_level_rank(self):
        assert level_rank("debug") < level_rank("info") < level_rank("error")
        assert level_rank("bogus") == 0
