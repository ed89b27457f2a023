"""
Gemini CLI Process Runner

Launches the Gemini CLI as a child process, consumes its ``stream-json``
output while it runs and turns the process exit into one ``TaskOutcome``
or one ``AgentRunError``.

Execution model:
- stdin, stdout and stderr are all pipes; stdin is closed right after spawn
  so the agent never waits for input
- stdout and stderr are pumped concurrently in fixed-size reads
- stdout chunks are decoded, each event is forwarded to the log feed and
  folded into the accumulator before the next chunk is read
- the exit status is collected after both streams reach EOF, so every
  chunk flushed before exit is observed
"""

from __future__ import annotations

import asyncio
import os
from typing import Optional

import structlog

from gemini_cli_mcp.core.domain.config_schema import GeminiCliSettings
from gemini_cli_mcp.core.domain.models import TaskOutcome
from gemini_cli_mcp.core.interfaces.logging import LoggerProtocol
from gemini_cli_mcp.infrastructure.logging.log_forwarder import LogForwarder
from gemini_cli_mcp.infrastructure.process.invocation import ProcessInvocation

logger = structlog.get_logger(__name__)

OUTPUT_FORMAT = "stream-json"

# Tools the agent may use without confirmation. Never taken from the caller.
ALLOWED_TOOLS: tuple[str, ...] = (
    "read_file",
    "write_file",
    "edit",
    "run_shell_command",
    "web_fetch",
    "google_web_search",
    "save_memory",
    "write_todos",
)


def build_args(task: str, history_id: Optional[str] = None) -> list[str]:
    """
    Build the Gemini CLI argument list for one task.

    Args:
        task: Prompt handed to the agent
        history_id: Session id of a previous run to continue

    Returns:
        Arguments following the executable name.
    """
    args = ["-p", task, "--output-format", OUTPUT_FORMAT]
    if history_id:
        args.extend(["--history-id", history_id])
    args.extend(["--allowed-tools", ",".join(ALLOWED_TOOLS)])
    return args


class GeminiProcessRunner:
    """
    Runs one Gemini CLI task per ``run`` call.

    Concurrent ``run`` calls are independent: each spawns its own process
    and owns its own ``ProcessInvocation``.

    Args:
        settings: Executable, timeout and read size
        forwarder: Receives the real-time feed of every run
        log: Optional structured logger (defaults to structlog)
    """

    def __init__(
        self,
        settings: GeminiCliSettings,
        forwarder: LogForwarder,
        log: Optional[LoggerProtocol] = None,
    ) -> None:
        self._settings = settings
        self._forwarder = forwarder
        self._logger = log or logger.bind(component="gemini_runner")

    def command(self, task: str, history_id: Optional[str] = None) -> list[str]:
        """Full command line: executable, configured prefix args, task args."""
        return [
            self._settings.executable,
            *self._settings.executable_args,
            *build_args(task, history_id),
        ]

    async def run(
        self, task: str, cwd: str, history_id: Optional[str] = None
    ) -> TaskOutcome:
        """
        Run the agent on ``task`` inside ``cwd``.

        ``cwd`` is expected to exist; callers validate it beforehand.

        Returns:
            TaskOutcome built from the accumulated events

        Raises:
            SpawnError: The process could not be started
            ProcessExitError: The process exited with a non-zero code
            TaskTimeoutError: The configured timeout elapsed
        """
        invocation = ProcessInvocation(self._forwarder)
        argv = self.command(task, history_id)
        env = {**os.environ, **self._settings.env} if self._settings.env else None

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=env,
            )
        except OSError as e:
            self._logger.error(
                "agent_spawn_failed",
                executable=self._settings.executable,
                cwd=cwd,
                error=str(e),
            )
            raise invocation.on_spawn_error(e, executable=self._settings.executable) from e

        self._logger.info(
            "agent_process_started",
            pid=process.pid,
            cwd=cwd,
            history_id=history_id,
        )
        if process.stdin is not None:
            process.stdin.close()

        try:
            if self._settings.timeout_seconds is None:
                exit_code = await self._communicate(process, invocation)
            else:
                exit_code = await asyncio.wait_for(
                    self._communicate(process, invocation),
                    timeout=self._settings.timeout_seconds,
                )
        except asyncio.TimeoutError:
            await self._terminate(process)
            self._logger.warning(
                "agent_process_timed_out",
                pid=process.pid,
                timeout_seconds=self._settings.timeout_seconds,
            )
            raise invocation.on_timeout(self._settings.timeout_seconds) from None
        except asyncio.CancelledError:
            await self._terminate(process)
            invocation.on_cancel()
            self._logger.warning("agent_process_cancelled", pid=process.pid)
            raise

        self._logger.info(
            "agent_process_exited",
            pid=process.pid,
            exit_code=exit_code,
            events=invocation.event_count,
        )
        return invocation.on_exit(exit_code)

    async def _communicate(
        self, process: asyncio.subprocess.Process, invocation: ProcessInvocation
    ) -> Optional[int]:
        await asyncio.gather(
            self._pump_stdout(process, invocation),
            self._pump_stderr(process, invocation),
        )
        return await process.wait()

    async def _pump_stdout(
        self, process: asyncio.subprocess.Process, invocation: ProcessInvocation
    ) -> None:
        assert process.stdout is not None
        while True:
            chunk = await process.stdout.read(self._settings.read_chunk_size)
            if not chunk:
                break
            invocation.on_stdout(chunk)
        invocation.on_stdout_eof()

    async def _pump_stderr(
        self, process: asyncio.subprocess.Process, invocation: ProcessInvocation
    ) -> None:
        assert process.stderr is not None
        while True:
            chunk = await process.stderr.read(self._settings.read_chunk_size)
            if not chunk:
                break
            invocation.on_stderr(chunk)
        invocation.on_stderr_eof()

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()
