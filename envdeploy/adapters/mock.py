"""
Mock adapter — test double for the IDE step.

Returns success by default; can be told to fail or time out, and
records every context it was asked to execute.
"""

from __future__ import annotations

from envdeploy.adapters.base import Adapter, ExecutionContext
from envdeploy.core.models.action import Receipt


class MockAdapter(Adapter):
    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._next: Receipt | None = None
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, error: str = "Mock failure", timed_out: bool = False) -> None:
        """Make every following execution fail."""
        self._next = Receipt.failure(
            adapter=self._name, action_id="", error=error, timed_out=timed_out
        )

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        if self._next is not None:
            return self._next.model_copy(update={"action_id": context.action.id})

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        self._call_log.clear()
        self._next = None
