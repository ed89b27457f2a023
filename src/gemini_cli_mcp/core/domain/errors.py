"""Domain-specific exception types for gemini-cli-mcp."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class GeminiCliMcpError(Exception):
    """Base exception for gemini-cli-mcp domain errors."""

    message: str
    code: str = "gemini_cli_mcp_error"
    details: Dict[str, Any] | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.details is None:
            self.details = {}

    def __str__(self) -> str:
        return self.message


class DirectoryNotFoundError(GeminiCliMcpError):
    """Raised when the requested working directory does not exist."""

    def __init__(self, cwd: str) -> None:
        self.cwd = cwd
        super().__init__(
            message=f"Directory {cwd} does not exist",
            code="directory_not_found",
            details={"cwd": cwd},
        )


class InputValidationError(GeminiCliMcpError):
    """Raised when tool arguments fail validation."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="validation_error", details=details)


class ConfigError(GeminiCliMcpError):
    """Error raised for configuration failures."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="config_error", details=details)


class AgentRunError(GeminiCliMcpError):
    """Base error for an agent invocation that started but did not succeed."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "agent_run_error",
        details: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class ProcessExitError(AgentRunError):
    """The agent process exited with a non-zero status."""

    def __init__(self, exit_code: int | None, stderr: str) -> None:
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(
            f"Gemini CLI exited with code {exit_code}. Error: {stderr}",
            code="process_exit",
            details={"exit_code": exit_code, "stderr": stderr},
        )


class SpawnError(AgentRunError):
    """The agent process could not be started."""

    def __init__(self, reason: str, *, executable: str | None = None) -> None:
        self.reason = reason
        details: Dict[str, Any] = {"reason": reason}
        if executable:
            details["executable"] = executable
        super().__init__(
            f"Failed to spawn Gemini CLI: {reason}",
            code="spawn_error",
            details=details,
        )


class TaskTimeoutError(AgentRunError):
    """The agent process did not finish within the configured timeout."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Gemini CLI timed out after {timeout_seconds:g}s",
            code="timeout",
            details={"timeout_seconds": timeout_seconds},
        )


class InvocationStateError(GeminiCliMcpError):
    """A process signal arrived after the invocation already settled."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="invocation_state", details=details)
