"""MCP server that delegates tasks to the Gemini CLI agent."""

__version__ = "0.1.0"
