"""
Application Layer - Task Service

Runs one delegated task end to end. Both the MCP tool and the CLI ``run``
command go through this service.

The TaskService:
- Validates the working directory before anything is spawned
- Builds a runner per call, wired to the caller's log sink
- Wraps runtime failures with a phase prefix so callers can tell
  "never started" from "ran but failed"
- Logs start, completion and failure
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import structlog

from gemini_cli_mcp.core.domain.config_schema import GeminiCliSettings
from gemini_cli_mcp.core.domain.errors import AgentRunError, DirectoryNotFoundError
from gemini_cli_mcp.core.domain.models import TaskOutcome
from gemini_cli_mcp.core.interfaces.log_sink import LogSinkProtocol
from gemini_cli_mcp.infrastructure.logging.log_forwarder import LogForwarder
from gemini_cli_mcp.infrastructure.process.gemini_runner import GeminiProcessRunner

logger = structlog.get_logger(__name__)

RUN_FAILURE_PREFIX = "Failed to run Gemini CLI: "

# Upper bound for flushing the log feed once a run has settled
LOG_DRAIN_TIMEOUT_SECONDS = 5.0

RunnerFactory = Callable[[GeminiCliSettings, LogForwarder], GeminiProcessRunner]


class TaskService:
    """
    Service orchestrating delegated task runs.

    Args:
        settings: Process settings shared by every run
        runner_factory: Builds the runner for a run (tests inject fakes here)
    """

    def __init__(
        self,
        settings: GeminiCliSettings,
        runner_factory: Optional[RunnerFactory] = None,
    ) -> None:
        self.settings = settings
        self._runner_factory = runner_factory or GeminiProcessRunner
        self._logger = logger.bind(component="task_service")

    async def run_task(
        self,
        task: str,
        cwd: str,
        sink: LogSinkProtocol,
        history_id: Optional[str] = None,
    ) -> TaskOutcome:
        """
        Run ``task`` with the Gemini CLI inside ``cwd``.

        Args:
            task: Task text handed to the agent
            cwd: Working directory, must exist
            sink: Receives the real-time feed of the run
            history_id: Session id of a previous run to continue

        Returns:
            TaskOutcome of the run

        Raises:
            DirectoryNotFoundError: ``cwd`` does not exist (nothing is spawned)
            AgentRunError: The run failed; message starts with
                ``Failed to run Gemini CLI:``
        """
        if not Path(cwd).is_dir():
            self._logger.warning("task_rejected_missing_directory", cwd=cwd)
            raise DirectoryNotFoundError(cwd)

        forwarder = LogForwarder(sink)
        runner = self._runner_factory(self.settings, forwarder)
        start = time.monotonic()
        self._logger.info(
            "task_started",
            cwd=cwd,
            history_id=history_id,
            task_length=len(task),
        )

        try:
            outcome = await runner.run(task, cwd, history_id)
        except AgentRunError as e:
            await forwarder.drain(timeout=LOG_DRAIN_TIMEOUT_SECONDS)
            self._logger.error(
                "task_failed",
                cwd=cwd,
                code=e.code,
                error=str(e),
                duration_seconds=time.monotonic() - start,
            )
            raise AgentRunError(
                f"{RUN_FAILURE_PREFIX}{e}",
                code=e.code,
                details=dict(e.details or {}),
            ) from e

        await forwarder.drain(timeout=LOG_DRAIN_TIMEOUT_SECONDS)
        self._logger.info(
            "task_completed",
            cwd=cwd,
            session_id=outcome.session_id,
            total_cost_usd=outcome.total_cost_usd,
            result_length=len(outcome.result),
            duration_seconds=time.monotonic() - start,
        )
        return outcome
