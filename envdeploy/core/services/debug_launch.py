"""
Debug launch settings — what the debugger starts for this project.

Lives in the per-user ``<project>.csproj.user`` file (created when
missing) inside a property group scoped to one configuration and
platform:

    <PropertyGroup Condition="'$(Configuration)|$(Platform)' == 'Debug|AnyCPU'">
      <StartAction>Program</StartAction>
      <StartProgram>D:\\Kernel\\Bin\\Kernel.Host.exe</StartProgram>
      <StartArguments>-env DEV1 -instance Portfolio</StartArguments>
    </PropertyGroup>
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

from envdeploy.core.models.artifacts import ProjectDescriptor
from envdeploy.core.models.settings import DeploySettings
from envdeploy.core.services.metadata import MetadataDocument
from envdeploy.core.services.transformer import compute_hostname

logger = logging.getLogger(__name__)

LAUNCH_FIELDS = ("StartAction", "StartProgram", "StartArguments")

USER_FILE_TOOLS_VERSION = "15.0"


def condition_for(configuration: str, platform: str) -> str:
    return f"'$(Configuration)|$(Platform)' == '{configuration}|{platform}'"


def _normalize_condition(condition: str) -> str:
    return re.sub(r"\s+", "", condition).replace('"', "'").casefold()


def desired_launch_values(
    settings: DeploySettings,
    environment: str,
    instance: str,
    project: ProjectDescriptor,
) -> dict[str, str]:
    launch = settings.debug_launch
    arguments = launch.start_arguments.format(
        environment=environment,
        instance=instance,
        project=project.name,
        hostname=compute_hostname(environment, settings.domain_suffix),
    )
    return {
        "StartAction": launch.start_action,
        "StartProgram": launch.start_program,
        "StartArguments": arguments,
    }


def open_user_settings(project: ProjectDescriptor) -> MetadataDocument:
    """Load the project's ``.user`` file, or start a new one."""
    return MetadataDocument.load_or_create(
        project.user_settings_path, ToolsVersion=USER_FILE_TOOLS_VERSION
    )


def find_property_group(doc: MetadataDocument, configuration: str, platform: str) -> ET.Element | None:
    wanted = _normalize_condition(condition_for(configuration, platform))
    for group in doc.root.findall(doc.q("PropertyGroup")):
        if _normalize_condition(group.get("Condition", "")) == wanted:
            return group
    return None


def ensure_debug_launch(
    doc: MetadataDocument,
    values: dict[str, str],
    configuration: str = "Debug",
    platform: str = "AnyCPU",
) -> list[str]:
    """Make the scoped property group hold ``values`` (in memory).

    Returns:
        Names of the fields whose value changed.
    """
    group = find_property_group(doc, configuration, platform)
    if group is None:
        group = doc.append(doc.root, "PropertyGroup", {"Condition": condition_for(configuration, platform)})
        logger.debug("Created %s|%s property group in %s", configuration, platform, doc.path.name)

    changed = []
    for name in LAUNCH_FIELDS:
        if name not in values:
            continue
        element, _created = doc.find_or_create_child(group, name)
        if doc.set_text(element, values[name]):
            changed.append(name)

    if changed:
        logger.info("%s: debug launch updated (%s)", doc.path.name, ", ".join(changed))
    return changed
