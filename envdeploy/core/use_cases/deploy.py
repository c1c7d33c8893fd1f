"""
Deploy use case — resolve, transform, write, update project metadata.

Stage order matters:

    1. resolve every artifact            (any failure → abort, nothing written)
    2. transform the environment config  (invalid encoding → abort)
    3. parse both metadata documents     (corrupt XML → abort, nothing written)
    4. dry run: report and stop
    5. back up + write the target config (write failure → abort)
    6. save project / user documents     (write failures → warnings)
    7. offer the startup-project step    (never fatal)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from envdeploy.adapters.base import Adapter
from envdeploy.adapters.ide import IdeCommandAdapter
from envdeploy.core.config.loader import ConfigError, load_settings
from envdeploy.core.errors import DeployError, WriteFailureError
from envdeploy.core.models.artifacts import CopyDirectiveOutcome, DebugLaunchOutcome
from envdeploy.core.models.settings import DeploySettings
from envdeploy.core.persistence.files import atomic_write_bytes, backup_file
from envdeploy.core.services.copy_directive import ensure_copy_always
from envdeploy.core.services.debug_launch import (
    desired_launch_values,
    ensure_debug_launch,
    open_user_settings,
)
from envdeploy.core.services.metadata import MetadataDocument
from envdeploy.core.services.startup import (
    Prompt,
    StartupOutcome,
    TimedConsolePrompt,
    register_startup_project,
)
from envdeploy.core.services.transformer import (
    ConfigPreview,
    apply_transform,
    compute_hostname,
    encode_config,
    preview,
)
from envdeploy.core.use_cases.resolve import ResolvedArtifacts, locate_artifacts

logger = logging.getLogger(__name__)


@dataclass
class DeployResult:
    """Structured summary of one deploy run."""

    dry_run: bool = False
    environment: str = ""
    instance: str = ""

    artifacts: ResolvedArtifacts | None = None
    hostname: str = ""

    config_changed: bool = False
    config_written: bool = False
    backup_path: Path | None = None
    preview: ConfigPreview | None = None

    copy_directive: CopyDirectiveOutcome | None = None
    debug_launch: DebugLaunchOutcome | None = None
    startup: StartupOutcome | None = None

    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None
    error_detail: dict | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def fail(self, error: DeployError) -> None:
        self.error = str(error)
        self.error_kind = error.kind
        self.error_detail = error.to_dict()

    def to_dict(self) -> dict:
        result: dict = {
            "ok": self.ok,
            "dry_run": self.dry_run,
            "environment": self.environment,
            "instance": self.instance,
        }
        if self.error:
            result["error"] = self.error
            result["error_kind"] = self.error_kind
            if self.error_detail:
                result["error_detail"] = self.error_detail
            return result

        a = self.artifacts
        if a is not None:
            result.update({
                "workspace_root": str(a.workspace_root),
                "project_file": str(a.project.file_path),
                "project_dir": str(a.project.directory),
                "matched_by": a.project.matched_by,
                "instance_dir": str(a.instance.folder_path),
                "environment_file": str(a.environment_config.source_file_path),
                "target_file": str(a.target.path),
            })

        result["hostname"] = self.hostname
        result["config_changed"] = self.config_changed
        result["config_written"] = self.config_written
        result["backup_path"] = str(self.backup_path) if self.backup_path else None
        result["copy_directive"] = (
            self.copy_directive.model_dump(mode="json") if self.copy_directive else None
        )
        result["debug_launch"] = (
            self.debug_launch.model_dump(mode="json") if self.debug_launch else None
        )
        result["startup"] = self.startup.to_dict() if self.startup else None
        result["preview"] = self.preview.to_dict() if self.preview else None
        result["warnings"] = self.warnings
        return result


def run_deploy(
    project: str,
    environment: str,
    instance: str,
    workspace: str,
    *,
    dry_run: bool = False,
    settings: DeploySettings | None = None,
    config_path: Path | None = None,
    prompt: Prompt | None = None,
    ide_adapter: Adapter | None = None,
    backup: bool | None = None,
    now: datetime | None = None,
) -> DeployResult:
    """Deploy one environment config into a project.

    Args:
        project: Loose project name.
        environment: Environment name (``DEV1`` → ``DEV1.config``).
        instance: Service-instance folder name under the deploy dir.
        workspace: Workspace selector (relative to ``workspace_base``).
        dry_run: Resolve and report, write nothing.
        settings: Pre-loaded settings (otherwise loaded from ``config_path``).
        prompt: Startup-project prompt (default: console with timeout).
        ide_adapter: IDE automation adapter (default: configured command).
        backup: Override ``settings.backup``.
        now: Timestamp for the backup suffix.

    Returns:
        DeployResult — ``error`` is set when the run aborted.
    """
    result = DeployResult(dry_run=dry_run, environment=environment, instance=instance)

    try:
        if settings is None:
            settings = load_settings(config_path)
    except ConfigError as e:
        result.error, result.error_kind = str(e), "config"
        return result

    if backup is not None:
        settings = settings.model_copy(update={"backup": backup})

    try:
        located = locate_artifacts(settings, project, instance, environment, workspace)
        result.artifacts = located

        env_config = apply_transform(located.environment_config, settings)
        located.environment_config = env_config
        result.hostname = compute_hostname(environment, settings.domain_suffix)

        project_doc = MetadataDocument.load(located.project.file_path)
        user_doc = open_user_settings(located.project)

        new_bytes = encode_config(env_config.transformed_content or "", env_config.has_bom)
        target_path = located.target.path
        try:
            current_bytes = target_path.read_bytes()
        except OSError as e:
            raise WriteFailureError(target_path, str(e)) from e
        result.config_changed = current_bytes != new_bytes

        result.copy_directive = ensure_copy_always(project_doc, target_path.name)
        launch = settings.debug_launch
        changed_fields = ensure_debug_launch(
            user_doc,
            desired_launch_values(settings, environment, located.instance.name, located.project),
            configuration=launch.configuration,
            platform=launch.platform,
        )
        result.debug_launch = DebugLaunchOutcome(
            path=user_doc.path,
            created=not user_doc.exists,
            changed_fields=changed_fields,
        )

        if dry_run:
            result.preview = preview(env_config.transformed_content or "", settings.preview_chars)
            logger.info("Dry run — no files written")
            return result

        if result.config_changed:
            if settings.backup:
                result.backup_path = backup_file(target_path, now)
            atomic_write_bytes(target_path, new_bytes)
            result.config_written = True
            logger.info("Wrote %s for %s", target_path, environment)
        else:
            logger.info("%s already matches %s — not rewritten", target_path.name, environment)

    except DeployError as e:
        result.fail(e)
        return result

    try:
        result.copy_directive.written = project_doc.save()
    except WriteFailureError as e:
        result.warnings.append(str(e))
        logger.warning(str(e))

    try:
        result.debug_launch.written = user_doc.save()
    except WriteFailureError as e:
        result.warnings.append(str(e))
        logger.warning(str(e))

    result.startup = register_startup_project(
        located.project,
        located.workspace_root,
        settings.startup,
        prompt or TimedConsolePrompt(),
        ide_adapter or IdeCommandAdapter(settings.startup.command),
    )
    if result.startup.warning:
        result.warnings.append(result.startup.warning)

    return result
