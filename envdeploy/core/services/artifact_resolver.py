"""
Deployment artifact resolver — instance folder, environment file, target file.

Layout this expects under a project directory:

    Kernel.Service/
        Kernel.Service.csproj
        Environment.config          ← target (overwritten)
        .Deploy/
            Portfolio/              ← service instance
                DEV1.config         ← environment config
                PROD.config

Each lookup fails with its own NotFound variant so the caller can
tell a missing instance from a missing environment.
"""

from __future__ import annotations

import logging
from pathlib import Path

from envdeploy.core.errors import (
    AmbiguousMatch,
    DeployDirNotFound,
    EnvironmentConfigNotFound,
    InstanceNotFound,
    TargetConfigNotFound,
)
from envdeploy.core.models.artifacts import (
    EnvironmentConfig,
    ProjectDescriptor,
    ServiceInstance,
    TargetConfigFile,
)
from envdeploy.core.models.settings import DeploySettings
from envdeploy.core.services.matching import Candidate, resolve_unique
from envdeploy.core.services.transformer import decode_config
from envdeploy.core.services.walk import find_child, iter_files

logger = logging.getLogger(__name__)

ENV_CONFIG_SUFFIX = ".config"


def deploy_dir(project: ProjectDescriptor, settings: DeploySettings) -> Path:
    """The project's deploy directory.

    Raises:
        DeployDirNotFound: If the project has none.
    """
    found = find_child(project.directory, settings.deploy_dir, want_dir=True)
    if found is None:
        raise DeployDirNotFound(settings.deploy_dir, project.directory)
    return found


def resolve_instance(
    project: ProjectDescriptor,
    instance_name: str,
    settings: DeploySettings,
) -> ServiceInstance:
    """Pick the service-instance folder for ``instance_name``.

    Raises:
        DeployDirNotFound: No deploy directory in the project.
        InstanceNotFound: No folder name contains ``instance_name``.
    """
    root = deploy_dir(project, settings)
    needle = instance_name.casefold()

    folders = sorted((p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name.lower())
    candidates = [
        Candidate(name=p.name, path=p, depth=1)
        for p in folders
        if needle in p.name.casefold()
    ]
    if not candidates:
        available = ", ".join(p.name for p in folders) or "none"
        raise InstanceNotFound(instance_name, root, hint=f"Available instances: {available}")

    outcome = resolve_unique(candidates, instance_name, settings.instance_match_rules)
    if outcome is None:
        raise AmbiguousMatch(instance_name, root, [c.path for c in candidates])

    logger.info("Instance '%s' → %s (rule: %s)", instance_name, outcome.candidate.path, outcome.rule)
    return ServiceInstance(
        requested_name=instance_name,
        folder_path=outcome.candidate.path,
        matched_by=outcome.rule,
    )


def _environment_files(instance: ServiceInstance) -> list[tuple[Path, int]]:
    return [
        (path, depth)
        for path, depth in iter_files(instance.folder_path)
        if path.suffix.casefold() == ENV_CONFIG_SUFFIX
    ]


def list_environments(instance: ServiceInstance) -> list[str]:
    """Environment names available in an instance (``DEV1.config`` → ``DEV1``)."""
    seen: dict[str, str] = {}
    for path, _depth in _environment_files(instance):
        seen.setdefault(path.stem.casefold(), path.stem)
    return sorted(seen.values(), key=str.casefold)


def find_environment_config(instance: ServiceInstance, environment: str) -> EnvironmentConfig:
    """Load ``<environment>.config`` from anywhere under the instance folder.

    Shallowest match wins; ties break on path.

    Raises:
        EnvironmentConfigNotFound: If no such file exists.
        TransformError: If the file is not valid UTF-8.
    """
    wanted = f"{environment}{ENV_CONFIG_SUFFIX}".casefold()
    matches = [
        (depth, str(path).lower(), path)
        for path, depth in _environment_files(instance)
        if path.name.casefold() == wanted
    ]
    if not matches:
        available = ", ".join(list_environments(instance)) or "none"
        raise EnvironmentConfigNotFound(
            environment, instance.folder_path, hint=f"Available environments: {available}"
        )

    source = min(matches)[2]
    logger.info("Environment '%s' → %s", environment, source)

    text, has_bom = decode_config(source.read_bytes(), source=str(source))
    return EnvironmentConfig(
        environment_name=environment,
        source_file_path=source,
        raw_content=text,
        has_bom=has_bom,
    )


def find_target_config(project: ProjectDescriptor, settings: DeploySettings) -> TargetConfigFile:
    """Locate the config file the build copies to its output.

    Looks directly in the project directory first, then recursively
    (skipping build output and the deploy directory).

    Raises:
        TargetConfigNotFound: If the file is nowhere in the project.
    """
    name = settings.target_config_name
    direct = find_child(project.directory, name, want_dir=False)
    if direct is not None:
        return TargetConfigFile(path=direct)

    skip = [*settings.skip_dirs, settings.deploy_dir]
    wanted = name.casefold()
    for path, _depth in sorted(
        iter_files(project.directory, skip),
        key=lambda item: (item[1], str(item[0]).lower()),
    ):
        if path.name.casefold() == wanted:
            logger.info("Target config found below project root: %s", path)
            return TargetConfigFile(path=path, found_recursively=True)

    raise TargetConfigNotFound(name, project.directory)
