"""Test configuration and shared fixtures."""

from __future__ import annotations

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from gemini_cli_mcp.core.domain.config_schema import GeminiCliSettings
from gemini_cli_mcp.core.interfaces.log_sink import LogSeverity


class RecordingSink:
    """Log sink that keeps every forwarded payload."""

    def __init__(self) -> None:
        self.records: list[tuple[LogSeverity, str]] = []

    async def send(self, severity: LogSeverity, payload: str) -> None:
        self.records.append((severity, payload))

    def payloads(self, severity: LogSeverity) -> list[str]:
        return [payload for sev, payload in self.records if sev == severity]


class FailingSink:
    """Log sink whose every delivery fails."""

    def __init__(self) -> None:
        self.calls = 0

    async def send(self, severity: LogSeverity, payload: str) -> None:
        self.calls += 1
        raise RuntimeError("sink unavailable")


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


@pytest.fixture
def fake_agent(tmp_path: Path) -> Callable[..., GeminiCliSettings]:
    """Build settings whose "Gemini CLI" is a Python script.

    The script receives the real agent arguments in ``sys.argv[1:]``.
    """

    def _make(body: str, **overrides) -> GeminiCliSettings:
        script = tmp_path / "fake_gemini.py"
        script.write_text(textwrap.dedent(body), encoding="utf-8")
        return GeminiCliSettings(
            executable=sys.executable,
            executable_args=[str(script)],
            **overrides,
        )

    return _make
