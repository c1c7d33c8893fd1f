"""Adapters — bindings for external collaborators (the IDE).

Public re-exports for convenient access.
"""

from envdeploy.adapters.base import Adapter, ExecutionContext
from envdeploy.adapters.ide import IdeCommandAdapter
from envdeploy.adapters.mock import MockAdapter

__all__ = [
    "Adapter",
    "ExecutionContext",
    "IdeCommandAdapter",
    "MockAdapter",
]
