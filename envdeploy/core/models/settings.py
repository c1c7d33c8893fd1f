"""
Deploy settings — everything that used to be hard-coded in the script.

Loaded from envdeploy.yml by ``envdeploy.core.config.loader``; every
field has a default so a missing settings file still yields a usable
configuration.
"""

from __future__ import annotations

import string
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator


class DebugLaunchSettings(BaseModel):
    """Per-user debugger launch target written into ``*.csproj.user``."""

    configuration: str = "Debug"
    platform: str = "AnyCPU"
    start_action: str = "Program"
    start_program: str = "D:\\Kernel\\Bin\\Kernel.Host.exe"
    # Formatted with environment, instance, project, hostname
    start_arguments: str = "-env {environment} -instance {instance}"

    @field_validator("start_arguments")
    @classmethod
    def _known_placeholders(cls, value: str) -> str:
        allowed = {"environment", "instance", "project", "hostname"}
        for _, field_name, _, _ in string.Formatter().parse(value):
            if field_name is not None and field_name not in allowed:
                raise ValueError(
                    f"Unknown placeholder '{{{field_name}}}' in start_arguments "
                    f"(allowed: {', '.join(sorted(allowed))})"
                )
        return value


class StartupSettings(BaseModel):
    """Optional "set as startup project" step."""

    enabled: bool = True
    prompt_timeout: float = 5.0
    # Empty → no IDE automation available
    command: str = ""
    command_timeout: float = 30.0

    @field_validator("prompt_timeout", "command_timeout")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        return value


class DeploySettings(BaseModel):
    """Effective configuration for one run."""

    workspace_base: str = "~/Source/Workspaces"
    namespace_prefix: str = "Kernel."

    project_extensions: list[str] = Field(default_factory=lambda: [".csproj"])
    project_match_rules: list[str] = Field(
        default_factory=lambda: ["exact", "namespace", "shallowest"]
    )
    instance_match_rules: list[str] = Field(default_factory=lambda: ["exact", "first"])

    deploy_dir: str = ".Deploy"
    target_config_name: str = "Environment.config"

    hostname_placeholder: str = "localhost"
    domain_suffix: str = "corp.local"
    target_drive: str = "D"

    backup: bool = True
    preview_chars: int = 400

    debug_launch: DebugLaunchSettings = Field(default_factory=DebugLaunchSettings)
    startup: StartupSettings = Field(default_factory=StartupSettings)

    skip_dirs: list[str] = Field(
        default_factory=lambda: [
            "bin", "obj", ".git", ".vs", "packages", "node_modules", "TestResults",
        ]
    )

    @field_validator("project_match_rules", "instance_match_rules")
    @classmethod
    def _known_rules(cls, value: list[str]) -> list[str]:
        from envdeploy.core.services.matching import MATCH_RULES

        if not value:
            raise ValueError("at least one match rule is required")
        unknown = [name for name in value if name not in MATCH_RULES]
        if unknown:
            raise ValueError(
                f"Unknown match rule(s): {', '.join(unknown)} "
                f"(known: {', '.join(sorted(MATCH_RULES))})"
            )
        return value

    @field_validator("target_drive")
    @classmethod
    def _drive_letter(cls, value: str) -> str:
        letter = value.rstrip(":\\/")
        if len(letter) != 1 or not letter.isalpha():
            raise ValueError(f"target_drive must be a single letter, got '{value}'")
        return letter.upper()

    @field_validator("project_extensions")
    @classmethod
    def _dotted(cls, value: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in value]

    @field_validator("preview_chars")
    @classmethod
    def _preview_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("preview_chars must be positive")
        return value

    @model_validator(mode="after")
    def _placeholder_not_in_domain(self) -> DeploySettings:
        # A hostname that still contains the placeholder would be rewritten again
        if not self.hostname_placeholder:
            raise ValueError("hostname_placeholder must not be empty")
        if self.hostname_placeholder.lower() in self.domain_suffix.lower():
            raise ValueError(
                f"domain_suffix '{self.domain_suffix}' contains the hostname "
                f"placeholder '{self.hostname_placeholder}'"
            )
        return self

    @property
    def workspace_base_path(self) -> Path:
        return Path(self.workspace_base).expanduser()

    @property
    def drive_root(self) -> str:
        return f"{self.target_drive}:\\"
