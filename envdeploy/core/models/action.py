"""
Action and Receipt models — the contract with external adapters.

The pipeline hands an adapter an Action and gets a Receipt back.
Adapters never raise: a failed or timed-out external step is a
Receipt with status "failed", which the caller turns into a warning.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A requested external operation (e.g. set the IDE startup project)."""

    id: str
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Outcome of an adapter execution."""

    adapter: str
    action_id: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    timed_out: bool = False

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **kwargs)
