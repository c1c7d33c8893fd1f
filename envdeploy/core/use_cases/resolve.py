"""
Resolve use case — locate every artifact a deploy needs, touch nothing.

Also backs ``envdeploy resolve``, ``envdeploy envs list`` and ``envdeploy envs show``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from envdeploy.core.config.loader import ConfigError, load_settings
from envdeploy.core.errors import DeployError
from envdeploy.core.models.artifacts import (
    EnvironmentConfig,
    ProjectDescriptor,
    ServiceInstance,
    TargetConfigFile,
)
from envdeploy.core.models.settings import DeploySettings
from envdeploy.core.services.artifact_resolver import (
    find_environment_config,
    find_target_config,
    list_environments,
    resolve_instance,
)
from envdeploy.core.services.project_resolver import find_project, resolve_workspace_root
from envdeploy.core.services.transformer import ConfigPreview, apply_transform, preview

logger = logging.getLogger(__name__)


@dataclass
class ResolvedArtifacts:
    """Everything the pipeline resolved, in stage order."""

    workspace_root: Path
    project: ProjectDescriptor
    instance: ServiceInstance
    environment_config: EnvironmentConfig
    target: TargetConfigFile


def locate_artifacts(
    settings: DeploySettings,
    project: str,
    instance: str,
    environment: str,
    workspace: str,
) -> ResolvedArtifacts:
    """Run every resolution stage in order.

    Raises:
        DeployError: The first stage that cannot resolve its target.
    """
    workspace_root = resolve_workspace_root(settings, workspace)
    descriptor = find_project(workspace_root, project, settings)
    service_instance = resolve_instance(descriptor, instance, settings)
    env_config = find_environment_config(service_instance, environment)
    target = find_target_config(descriptor, settings)
    return ResolvedArtifacts(
        workspace_root=workspace_root,
        project=descriptor,
        instance=service_instance,
        environment_config=env_config,
        target=target,
    )


@dataclass
class ResolveResult:
    artifacts: ResolvedArtifacts | None = None
    environments: list[str] = field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        if self.error:
            return {"ok": False, "error": self.error, "error_kind": self.error_kind}

        data: dict = {"ok": True, "environments": self.environments}
        a = self.artifacts
        if a is not None:
            data.update({
                "workspace_root": str(a.workspace_root),
                "project_file": str(a.project.file_path),
                "project_dir": str(a.project.directory),
                "matched_by": a.project.matched_by,
                "instance_dir": str(a.instance.folder_path),
                "environment_file": str(a.environment_config.source_file_path),
                "target_file": str(a.target.path),
            })
        return data


def run_resolve(
    project: str,
    instance: str,
    environment: str,
    workspace: str,
    *,
    settings: DeploySettings | None = None,
    config_path: Path | None = None,
) -> ResolveResult:
    """Resolve all artifacts and report them."""
    result = ResolveResult()

    try:
        if settings is None:
            settings = load_settings(config_path)
        result.artifacts = locate_artifacts(settings, project, instance, environment, workspace)
        result.environments = list_environments(result.artifacts.instance)
    except ConfigError as e:
        result.error, result.error_kind = str(e), "config"
    except DeployError as e:
        result.error, result.error_kind = str(e), e.kind

    return result


@dataclass
class EnvironmentListing:
    instance_dir: Path | None = None
    environments: list[str] = field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"ok": False, "error": self.error, "error_kind": self.error_kind}
        return {
            "ok": True,
            "instance_dir": str(self.instance_dir),
            "environments": self.environments,
        }


def run_list_environments(
    project: str,
    instance: str,
    workspace: str,
    *,
    settings: DeploySettings | None = None,
    config_path: Path | None = None,
) -> EnvironmentListing:
    """Environments an instance can be deployed as."""
    listing = EnvironmentListing()

    try:
        if settings is None:
            settings = load_settings(config_path)
        workspace_root = resolve_workspace_root(settings, workspace)
        descriptor = find_project(workspace_root, project, settings)
        service_instance = resolve_instance(descriptor, instance, settings)
    except ConfigError as e:
        listing.error, listing.error_kind = str(e), "config"
        return listing
    except DeployError as e:
        listing.error, listing.error_kind = str(e), e.kind
        return listing

    listing.instance_dir = service_instance.folder_path
    listing.environments = list_environments(service_instance)
    return listing


@dataclass
class EnvironmentPreview:
    source_file: Path | None = None
    preview: ConfigPreview | None = None
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"ok": False, "error": self.error, "error_kind": self.error_kind}
        return {
            "ok": True,
            "source_file": str(self.source_file),
            "preview": self.preview.to_dict() if self.preview else None,
        }


def run_preview_environment(
    project: str,
    instance: str,
    environment: str,
    workspace: str,
    *,
    settings: DeploySettings | None = None,
    config_path: Path | None = None,
    chars: int | None = None,
) -> EnvironmentPreview:
    """An environment config as it would be deployed.

    Only resolves as far as the environment file: the project's target
    config and metadata documents are not looked at.
    """
    result = EnvironmentPreview()

    try:
        if settings is None:
            settings = load_settings(config_path)
        workspace_root = resolve_workspace_root(settings, workspace)
        descriptor = find_project(workspace_root, project, settings)
        service_instance = resolve_instance(descriptor, instance, settings)
        env_config = apply_transform(
            find_environment_config(service_instance, environment), settings
        )
    except ConfigError as e:
        result.error, result.error_kind = str(e), "config"
        return result
    except DeployError as e:
        result.error, result.error_kind = str(e), e.kind
        return result

    result.source_file = env_config.source_file_path
    result.preview = preview(env_config.transformed_content or "", chars or settings.preview_chars)
    return result
