"""
Process Invocation State

Everything that belongs to one agent run: raw stdout and stderr buffers, the
stream decoder, the session accumulator and the settlement state.

The invocation is a small state machine with two states, RUNNING and SETTLED.
Each terminal signal (process exit, spawn failure, timeout) moves it to
SETTLED exactly once; any signal after that raises ``InvocationStateError``.
"""

from __future__ import annotations

import codecs
from enum import Enum

from gemini_cli_mcp.core.domain.accumulator import SessionAccumulator
from gemini_cli_mcp.core.domain.errors import (
    InvocationStateError,
    ProcessExitError,
    SpawnError,
    TaskTimeoutError,
)
from gemini_cli_mcp.core.domain.models import TaskOutcome
from gemini_cli_mcp.core.domain.stream_events import StreamEvent
from gemini_cli_mcp.infrastructure.logging.log_forwarder import LogForwarder
from gemini_cli_mcp.infrastructure.stream.ndjson_decoder import StreamEventDecoder


class InvocationState(str, Enum):
    RUNNING = "running"
    SETTLED = "settled"


class ProcessInvocation:
    """
    Per-call state of one Gemini CLI run.

    Never shared between calls; discarded once settled.
    """

    def __init__(self, forwarder: LogForwarder) -> None:
        self._forwarder = forwarder
        self._decoder = StreamEventDecoder()
        self._stderr_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._stdout_parts: list[str] = []
        self._stderr_parts: list[str] = []
        self.accumulator = SessionAccumulator()
        self.state = InvocationState.RUNNING
        self.event_count = 0

    @property
    def settled(self) -> bool:
        return self.state == InvocationState.SETTLED

    @property
    def raw_output(self) -> str:
        return "".join(self._stdout_parts)

    @property
    def raw_error(self) -> str:
        return "".join(self._stderr_parts)

    def on_stdout(self, chunk: bytes | str) -> list[StreamEvent]:
        """Buffer a stdout chunk, then forward and fold each completed event."""
        self._ensure_running("stdout")
        text = self._decoder.decode_text(chunk)
        self._stdout_parts.append(text)
        events = self._decoder.feed_text(text)
        self._consume(events)
        return events

    def on_stdout_eof(self) -> list[StreamEvent]:
        """Decode a final record that was not newline-terminated."""
        self._ensure_running("stdout_eof")
        tail = self._decoder.end_text()
        self._stdout_parts.append(tail)
        events = self._decoder.feed_text(tail) + self._decoder.flush()
        self._consume(events)
        return events

    def on_stderr(self, chunk: bytes | str) -> None:
        """Buffer a stderr chunk and forward it at error severity."""
        self._ensure_running("stderr")
        text = self._stderr_decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        self._stderr_parts.append(text)
        self._forwarder.forward_stderr(text)

    def on_stderr_eof(self) -> None:
        """Flush bytes of an incomplete character left at the end of stderr."""
        self._ensure_running("stderr_eof")
        tail = self._stderr_decoder.decode(b"", final=True)
        if tail:
            self._stderr_parts.append(tail)
            self._forwarder.forward_stderr(tail)

    def on_exit(self, exit_code: int | None) -> TaskOutcome:
        """
        Settle on process exit.

        Returns:
            The outcome when ``exit_code`` is 0.

        Raises:
            ProcessExitError: For any other exit code.
        """
        self._settle("exit")
        if exit_code == 0:
            return self.accumulator.to_outcome(self.raw_output)
        raise ProcessExitError(exit_code, self.raw_error)

    def on_spawn_error(self, error: OSError, executable: str | None = None) -> SpawnError:
        """Settle on a spawn failure and return the error to raise."""
        self._settle("spawn_error")
        reason = error.strerror or str(error)
        if error.filename and str(error.filename) not in reason:
            reason = f"{reason}: {error.filename!r}"
        return SpawnError(reason, executable=executable)

    def on_timeout(self, timeout_seconds: float) -> TaskTimeoutError:
        """Settle on timeout and return the error to raise."""
        self._settle("timeout")
        return TaskTimeoutError(timeout_seconds)

    def on_cancel(self) -> None:
        """Settle because the awaiting caller was cancelled."""
        self._settle("cancel")

    def _consume(self, events: list[StreamEvent]) -> None:
        for event in events:
            self._forwarder.forward_event(event)
            self.accumulator.fold(event)
            self.event_count += 1

    def _settle(self, signal: str) -> None:
        self._ensure_running(signal)
        self.state = InvocationState.SETTLED

    def _ensure_running(self, signal: str) -> None:
        if self.state != InvocationState.RUNNING:
            raise InvocationStateError(
                f"Received {signal} after the invocation settled",
                details={"signal": signal},
            )
