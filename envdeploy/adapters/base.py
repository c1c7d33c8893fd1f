"""
Adapter base — the contract between the pipeline and external tools.

The pipeline never talks to an IDE (or any other outside process)
directly; it builds an Action and asks an adapter to execute it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from envdeploy.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    workspace_root: str = "."
    environment: str = ""
    timeout: float = 30.0
    params: dict[str, Any] = Field(default_factory=dict)


class Adapter(ABC):
    """Abstract base class for adapters.

    Adapters perform external side effects and return receipts.
    They NEVER raise — failures and timeouts are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g. 'ide-command')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the external tool can be reached. Fast, never raises."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt. MUST NOT raise."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
