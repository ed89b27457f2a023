"""Gemini CLI MCP Server.

Provides one tool:
- task: Run the Gemini CLI agent on a task inside a working directory

While a task runs, every stream event of the agent and every line it writes
to stderr is sent to the client as a log notification.
"""

from __future__ import annotations

from typing import Any

import structlog
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, LoggingLevel, Tool

from gemini_cli_mcp import __version__
from gemini_cli_mcp.api.task_tool import TASK_TOOL, TASK_TOOL_NAME, TaskToolHandler, error_result
from gemini_cli_mcp.application.task_service import TaskService
from gemini_cli_mcp.core.domain.config_schema import GeminiCliSettings
from gemini_cli_mcp.infrastructure.logging.mcp_sink import McpSessionLogSink

logger = structlog.get_logger(__name__)

DEFAULT_CLIENT_LOG_LEVEL = "debug"


class ClientLogLevel:
    """Lowest level the client asked for via ``logging/setLevel``."""

    def __init__(self, level: str = DEFAULT_CLIENT_LOG_LEVEL) -> None:
        self.level = level

    def get(self) -> str:
        return self.level


def create_server(
    settings: GeminiCliSettings, service: TaskService | None = None
) -> Server:
    """Build an MCP server exposing the ``task`` tool.

    Args:
        settings: Server and agent settings
        service: Task service to use (built from ``settings`` when omitted)
    """
    server: Server = Server(settings.server_name, version=__version__)
    handler = TaskToolHandler(service or TaskService(settings))
    client_level = ClientLogLevel()

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        return [TASK_TOOL]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
        """Execute a tool and return results."""
        logger.info("tool_called", tool=name)
        if name != TASK_TOOL_NAME:
            return error_result(f"Unknown tool: {name}")

        ctx = server.request_context
        sink = McpSessionLogSink(
            ctx.session,
            logger_name=settings.server_name,
            related_request_id=ctx.request_id,
            min_level=client_level.get,
        )
        return await handler.handle(arguments, sink)

    @server.set_logging_level()
    async def set_logging_level(level: LoggingLevel) -> None:
        logger.info("client_log_level_set", client_level=level)
        client_level.level = level

    return server


async def run_stdio_server(settings: GeminiCliSettings) -> None:
    """Run the MCP server on stdin/stdout."""
    server = create_server(settings)
    logger.info(
        "starting_gemini_cli_mcp_server",
        server_name=settings.server_name,
        executable=settings.executable,
        version=__version__,
    )

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
