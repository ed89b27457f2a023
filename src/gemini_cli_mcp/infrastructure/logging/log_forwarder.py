"""
Log Forwarder

Relays the real-time feed of an agent run to a ``LogSinkProtocol``:

- every decoded stream event, at info severity, with the raw line as payload
- every stderr chunk, at error severity, with the chunk text as payload

Delivery is fire-and-forget. Each payload is handed to the sink in its own
asyncio task; a failing or slow sink never delays or changes the outcome of
the run. Failures are logged and otherwise dropped.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from gemini_cli_mcp.core.domain.stream_events import StreamEvent
from gemini_cli_mcp.core.interfaces.log_sink import LogSeverity, LogSinkProtocol

logger = structlog.get_logger(__name__)


class LogForwarder:
    """Schedules sink deliveries without awaiting them."""

    def __init__(self, sink: LogSinkProtocol) -> None:
        self._sink = sink
        self._pending: set[asyncio.Task[None]] = set()
        self._logger = logger.bind(component="log_forwarder")

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def forward_event(self, event: StreamEvent) -> None:
        self._schedule(LogSeverity.INFO, event.raw)

    def forward_stderr(self, text: str) -> None:
        if text:
            self._schedule(LogSeverity.ERROR, text)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for scheduled deliveries, at most ``timeout`` seconds."""
        if self._pending:
            await asyncio.wait(list(self._pending), timeout=timeout)

    def _schedule(self, severity: LogSeverity, payload: str) -> None:
        task = asyncio.get_running_loop().create_task(self._deliver(severity, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, severity: LogSeverity, payload: str) -> None:
        try:
            await self._sink.send(severity, payload)
        except Exception as e:
            self._logger.warning(
                "log_forward_failed",
                severity=severity.value,
                error=str(e),
                error_type=type(e).__name__,
            )


class StructlogSink:
    """Sink that writes the feed to the structured log (CLI usage)."""

    def __init__(self, bound_logger: Any | None = None) -> None:
        self._logger = bound_logger or structlog.get_logger("gemini_cli_mcp.agent")

    async def send(self, severity: LogSeverity, payload: str) -> None:
        if severity == LogSeverity.ERROR:
            self._logger.error("agent_stderr", payload=payload.rstrip("\n"))
        elif severity == LogSeverity.WARNING:
            self._logger.warning("agent_output", payload=payload)
        elif severity == LogSeverity.DEBUG:
            self._logger.debug("agent_output", payload=payload)
        else:
            self._logger.info("agent_event", payload=payload)


class NullSink:
    """Sink that discards everything."""

    async def send(self, severity: LogSeverity, payload: str) -> None:
        return None
