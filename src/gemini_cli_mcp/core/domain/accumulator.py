"""
Session Accumulator

Folds decoded stream events into the running state of one invocation:
the assistant's answer text, the session identifier and the total cost.
"""

from __future__ import annotations

from dataclasses import dataclass

from gemini_cli_mcp.core.domain.models import TaskOutcome
from gemini_cli_mcp.core.domain.stream_events import (
    InitEvent,
    MessageEvent,
    ResultEvent,
    StreamEvent,
)

ASSISTANT_ROLE = "assistant"


@dataclass
class SessionAccumulator:
    """
    Running state tallied across a single invocation's events.

    Later events overwrite earlier scalar fields. Assistant message content
    is always appended, whatever the ``delta`` flag says.
    """

    answer_text: str = ""
    session_id: str | None = None
    total_cost_usd: float | None = None

    def fold(self, event: StreamEvent) -> None:
        """Apply one event. Unrecognized events and missing fields are no-ops."""
        if isinstance(event, InitEvent):
            if event.session_id:
                self.session_id = event.session_id
        elif isinstance(event, MessageEvent):
            if event.role == ASSISTANT_ROLE and event.content:
                self.answer_text += event.content
        elif isinstance(event, ResultEvent):
            if event.total_cost_usd is not None:
                self.total_cost_usd = event.total_cost_usd

    def to_outcome(self, raw_output: str) -> TaskOutcome:
        """Build the outcome, falling back to ``raw_output`` without assistant text."""
        return TaskOutcome(
            result=self.answer_text or raw_output,
            session_id=self.session_id,
            total_cost_usd=self.total_cost_usd,
        )
