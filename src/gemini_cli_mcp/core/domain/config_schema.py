"""
Configuration Schema Validation

Pydantic model for the server and agent-process settings.
Provides clear error messages with file and field context.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gemini_cli_mcp.core.domain.errors import ConfigError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class GeminiCliSettings(BaseModel):
    """Settings for launching the Gemini CLI and serving the MCP tool."""

    model_config = ConfigDict(extra="forbid")

    executable: str = Field(
        "gemini",
        min_length=1,
        description="Gemini CLI executable name or path",
    )
    executable_args: list[str] = Field(
        default_factory=list,
        description="Arguments placed before the task arguments (e.g. for npx)",
    )
    timeout_seconds: Optional[float] = Field(
        None,
        gt=0,
        description="Kill the agent after this many seconds; unset waits forever",
    )
    read_chunk_size: int = Field(
        65536,
        ge=1,
        description="Bytes read per stdout/stderr chunk",
    )
    log_level: str = Field(
        "INFO",
        description="Log level for the server's own structured logs",
    )
    server_name: str = Field(
        "gemini-cli-mcp",
        min_length=1,
        description="MCP server name advertised to clients",
    )
    env: dict[str, str] = Field(
        default_factory=dict,
        description="Extra environment variables for the agent process",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.upper()
            if value not in LOG_LEVELS:
                raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value


class ConfigValidationError(ConfigError):
    """
    Error raised when configuration validation fails.

    Includes file path and detailed error message.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        field_path: Optional[str] = None,
    ):
        self.file_path = file_path
        self.field_path = field_path

        parts = []
        if file_path:
            parts.append(f"File: {file_path}")
        if field_path:
            parts.append(f"Field: {field_path}")
        parts.append(message)

        details: dict[str, Any] = {}
        if file_path:
            details["file_path"] = str(file_path)
        if field_path:
            details["field_path"] = field_path
        super().__init__(" | ".join(parts), details=details)


def validate_settings(
    data: dict[str, Any],
    file_path: Optional[Path] = None,
) -> GeminiCliSettings:
    """
    Validate settings data.

    Args:
        data: Configuration dictionary
        file_path: Optional file path for error messages

    Returns:
        Validated GeminiCliSettings

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        return GeminiCliSettings(**data)
    except Exception as e:
        raise ConfigValidationError(
            str(e),
            file_path=file_path,
        ) from e
