"""Tests for ProcessInvocation settlement and buffering."""

import pytest

from gemini_cli_mcp.core.domain.errors import InvocationStateError, ProcessExitError, SpawnError
from gemini_cli_mcp.core.interfaces.log_sink import LogSeverity
from gemini_cli_mcp.infrastructure.logging.log_forwarder import LogForwarder
from gemini_cli_mcp.infrastructure.process.invocation import InvocationState, ProcessInvocation


@pytest.fixture
def invocation(recording_sink) -> ProcessInvocation:
    return ProcessInvocation(LogForwarder(recording_sink))


class TestBuffering:
    async def test_stdout_chunks_are_decoded_in_order(self, invocation):
        assert invocation.on_stdout(b'{"type":"init","session_id":"s"}\n{"type":"mess') != []
        events = invocation.on_stdout(b'age","role":"assistant","content":"x"}\n')
        assert [event.type for event in events] == ["message"]
        assert invocation.accumulator.session_id == "s"
        assert invocation.accumulator.answer_text == "x"
        assert invocation.event_count == 2

    async def test_raw_output_keeps_every_byte(self, invocation):
        invocation.on_stdout(b"plain ")
        invocation.on_stdout(b"text\n")
        invocation.on_stdout_eof()
        assert invocation.raw_output == "plain text\n"

    async def test_stderr_is_buffered_and_forwarded(self, invocation, recording_sink):
        invocation.on_stderr(b"first ")
        invocation.on_stderr("second")
        await invocation._forwarder.drain()
        assert invocation.raw_error == "first second"
        assert recording_sink.payloads(LogSeverity.ERROR) == ["first ", "second"]

    async def test_truncated_stderr_character_is_replaced(self, invocation, recording_sink):
        invocation.on_stderr("warn ".encode() + "é".encode()[:1])
        invocation.on_stderr_eof()
        await invocation._forwarder.drain()
        assert invocation.raw_error == "warn \ufffd"
        assert recording_sink.payloads(LogSeverity.ERROR) == ["warn ", "\ufffd"]

    async def test_complete_stderr_has_nothing_to_flush(self, invocation, recording_sink):
        invocation.on_stderr("café".encode())
        invocation.on_stderr_eof()
        await invocation._forwarder.drain()
        assert invocation.raw_error == "café"
        assert recording_sink.payloads(LogSeverity.ERROR) == ["café"]


class TestSettlement:
    async def test_exit_zero_resolves(self, invocation):
        invocation.on_stdout(b"no events\n")
        outcome = invocation.on_exit(0)
        assert outcome.result == "no events\n"
        assert invocation.state == InvocationState.SETTLED

    async def test_non_zero_exit_fails(self, invocation):
        invocation.on_stderr(b"bad")
        with pytest.raises(ProcessExitError) as exc_info:
            invocation.on_exit(2)
        assert exc_info.value.stderr == "bad"
        assert invocation.settled

    async def test_spawn_error_message(self, invocation):
        error = FileNotFoundError(2, "No such file or directory", "gemini")
        spawn_error = invocation.on_spawn_error(error, executable="gemini")
        assert isinstance(spawn_error, SpawnError)
        assert str(spawn_error) == "Failed to spawn Gemini CLI: No such file or directory: 'gemini'"
        assert invocation.settled

    async def test_only_one_terminal_signal(self, invocation):
        invocation.on_exit(0)
        with pytest.raises(InvocationStateError):
            invocation.on_exit(0)
        with pytest.raises(InvocationStateError):
            invocation.on_timeout(1.0)
        with pytest.raises(InvocationStateError):
            invocation.on_spawn_error(PermissionError(13, "Permission denied"))

    async def test_no_data_after_settlement(self, invocation):
        invocation.on_spawn_error(PermissionError(13, "Permission denied"))
        with pytest.raises(InvocationStateError):
            invocation.on_stdout(b"late\n")
        with pytest.raises(InvocationStateError):
            invocation.on_stderr(b"late")
