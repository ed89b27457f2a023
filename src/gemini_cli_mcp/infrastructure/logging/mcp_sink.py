"""
MCP Session Log Sink

Sends the run feed to the MCP client as ``notifications/message``, tagged
with the id of the ``tools/call`` request that started the run.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from gemini_cli_mcp.core.interfaces.log_sink import LogSeverity

# RFC 5424 order used by MCP logging levels
MCP_LEVEL_ORDER: tuple[str, ...] = (
    "debug",
    "info",
    "notice",
    "warning",
    "error",
    "critical",
    "alert",
    "emergency",
)


def level_rank(level: str) -> int:
    try:
        return MCP_LEVEL_ORDER.index(level)
    except ValueError:
        return 0


class McpSessionLogSink:
    """
    Sink bound to one client session and request.

    Args:
        session: MCP ``ServerSession`` of the calling client
        logger_name: Logger name shown by the client
        related_request_id: Request id the notifications belong to
        min_level: Returns the lowest level the client asked to receive
    """

    def __init__(
        self,
        session: Any,
        *,
        logger_name: str,
        related_request_id: Any | None = None,
        min_level: Callable[[], str] | None = None,
    ) -> None:
        self._session = session
        self._logger_name = logger_name
        self._related_request_id = related_request_id
        self._min_level = min_level

    async def send(self, severity: LogSeverity, payload: str) -> None:
        level = severity.value
        if self._min_level is not None and level_rank(level) < level_rank(self._min_level()):
            return
        await self._session.send_log_message(
            level=level,
            data=payload,
            logger=self._logger_name,
            related_request_id=self._related_request_id,
        )
