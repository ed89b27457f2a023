"""Request schema for the ``task`` tool."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gemini_cli_mcp.core.domain.errors import InputValidationError


class TaskRequest(BaseModel):
    """Arguments of the ``task`` tool."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    task: str = Field(
        ...,
        description="The task to delegate, keep it close to original user query",
    )
    cwd: str = Field(
        ...,
        description="The working directory to run the Gemini CLI, must be an absolute path",
    )
    history_id: Optional[str] = Field(
        None,
        alias="historyId",
        description="Continue from a previous session (session_id from previous response)",
    )


def task_input_schema() -> dict[str, Any]:
    """JSON schema advertised in ``tools/list``."""
    return {
        "type": "object",
        "properties": {
            "task": {
                "type": "string",
                "description": TaskRequest.model_fields["task"].description,
            },
            "cwd": {
                "type": "string",
                "description": TaskRequest.model_fields["cwd"].description,
            },
            "historyId": {
                "type": "string",
                "description": TaskRequest.model_fields["history_id"].description,
            },
        },
        "required": ["task", "cwd"],
    }


def parse_task_request(arguments: dict[str, Any] | None) -> TaskRequest:
    """
    Validate raw tool arguments.

    Raises:
        InputValidationError: Missing or mistyped arguments.
    """
    try:
        return TaskRequest.model_validate(arguments or {})
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        ]
        raise InputValidationError(
            "Invalid arguments for task: " + "; ".join(problems),
            details={"errors": problems},
        ) from e
