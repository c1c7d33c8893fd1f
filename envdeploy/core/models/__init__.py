"""
Domain models — Pydantic types for the deploy pipeline.

    from envdeploy.core.models import DeploySettings, ProjectDescriptor, Receipt
"""

from envdeploy.core.models.action import Action, Receipt
from envdeploy.core.models.artifacts import (
    CopyDirectiveOutcome,
    DebugLaunchOutcome,
    EnvironmentConfig,
    ProjectDescriptor,
    ServiceInstance,
    TargetConfigFile,
)
from envdeploy.core.models.settings import (
    DebugLaunchSettings,
    DeploySettings,
    StartupSettings,
)

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # artifacts.py
    "CopyDirectiveOutcome",
    "DebugLaunchOutcome",
    "EnvironmentConfig",
    "ProjectDescriptor",
    "ServiceInstance",
    "TargetConfigFile",
    # settings.py
    "DebugLaunchSettings",
    "DeploySettings",
    "StartupSettings",
]
