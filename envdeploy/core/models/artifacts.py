"""
Artifact models — what each pipeline stage resolves.

Resolved fresh on every run; the frozen ones are never mutated after
their stage returns them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ProjectDescriptor(BaseModel):
    """The project definition file picked from a loose name."""

    model_config = ConfigDict(frozen=True)

    name: str
    loose_pattern: str
    file_path: Path
    directory: Path
    matched_by: str = ""

    @property
    def user_settings_path(self) -> Path:
        """Per-user settings file living next to the project file."""
        return self.file_path.with_name(self.file_path.name + ".user")


class ServiceInstance(BaseModel):
    """A deployable instance folder under the project's deploy directory."""

    model_config = ConfigDict(frozen=True)

    requested_name: str
    folder_path: Path
    matched_by: str = ""

    @property
    def name(self) -> str:
        return self.folder_path.name


class EnvironmentConfig(BaseModel):
    """One ``<environment>.config`` file and its rewritten text."""

    environment_name: str
    source_file_path: Path
    raw_content: str
    transformed_content: str | None = None
    has_bom: bool = False


class TargetConfigFile(BaseModel):
    """The config file inside the project that gets overwritten."""

    model_config = ConfigDict(frozen=True)

    path: Path
    found_recursively: bool = False


class CopyDirectiveOutcome(BaseModel):
    """Result of making sure the target config is copied on build."""

    found: bool = False
    changed: bool = False
    previous: str | None = None
    item_type: str | None = None
    written: bool = False


class DebugLaunchOutcome(BaseModel):
    """Result of updating the per-user debugger launch settings."""

    path: Path
    created: bool = False
    changed_fields: list[str] = Field(default_factory=list)
    written: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.changed_fields)
