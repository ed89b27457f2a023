"""
The ``task`` MCP tool.

Validates the arguments, runs the task through ``TaskService`` and turns the
outcome (or the failure) into a ``CallToolResult``.
"""

from __future__ import annotations

from typing import Any

import structlog
from mcp.types import CallToolResult, TextContent, Tool

from gemini_cli_mcp.api.schemas import parse_task_request, task_input_schema
from gemini_cli_mcp.application.task_service import TaskService
from gemini_cli_mcp.core.domain.errors import GeminiCliMcpError
from gemini_cli_mcp.core.domain.models import TaskOutcome
from gemini_cli_mcp.core.interfaces.log_sink import LogSinkProtocol

logger = structlog.get_logger(__name__)

TASK_TOOL_NAME = "task"

TASK_TOOL = Tool(
    name=TASK_TOOL_NAME,
    title="New task",
    description="Run Gemini CLI agent to complete a task",
    inputSchema=task_input_schema(),
)


def success_result(outcome: TaskOutcome) -> CallToolResult:
    """
    Tool result for a finished run.

    The ``chatwise`` metadata tells the client to display the result text
    directly instead of calling the tool again.
    """
    return CallToolResult(
        content=[TextContent(type="text", text=outcome.to_json())],
        _meta={
            "chatwise": {
                "stop": True,
                "markdown": outcome.result or "",
            }
        },
    )


def error_result(message: str) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=message)],
        isError=True,
    )


class TaskToolHandler:
    """Executes ``task`` tool calls."""

    def __init__(self, service: TaskService) -> None:
        self._service = service
        self._logger = logger.bind(component="task_tool")

    async def handle(
        self, arguments: dict[str, Any] | None, sink: LogSinkProtocol
    ) -> CallToolResult:
        try:
            request = parse_task_request(arguments)
            outcome = await self._service.run_task(
                request.task,
                request.cwd,
                sink,
                history_id=request.history_id,
            )
        except GeminiCliMcpError as e:
            self._logger.warning("tool_failed", tool=TASK_TOOL_NAME, code=e.code, error=str(e))
            return error_result(str(e))

        self._logger.info("tool_completed", tool=TASK_TOOL_NAME, session_id=outcome.session_id)
        return success_result(outcome)
