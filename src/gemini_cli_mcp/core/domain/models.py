"""
Core Domain Models

Result types returned by a delegated task invocation.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TaskOutcome:
    """
    Consolidated result of one Gemini CLI run.

    Attributes:
        result: Accumulated assistant text, or the raw stdout when the agent
            produced no assistant content
        session_id: Session identifier reported by the ``init`` event; pass it
            back as ``historyId`` to continue the session
        total_cost_usd: Total cost reported by the ``result`` event
    """

    result: str
    session_id: str | None = None
    total_cost_usd: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary, omitting absent optionals."""
        data: dict[str, Any] = {"result": self.result}
        if self.session_id is not None:
            data["session_id"] = self.session_id
        if self.total_cost_usd is not None:
            data["total_cost_usd"] = self.total_cost_usd
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
