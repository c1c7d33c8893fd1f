"""
Config check use case — validate envdeploy.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from envdeploy.core.config.loader import ConfigError, find_settings_file, load_settings
from envdeploy.core.models.settings import DeploySettings


@dataclass
class ConfigCheckResult:
    """Result of settings validation."""

    valid: bool = False
    settings: DeploySettings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "workspace_base": str(self.settings.workspace_base_path) if self.settings else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate settings and flag values that will make every deploy fail.

    Args:
        config_path: Optional explicit path to envdeploy.yml.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_settings_file()
    result.config_path = config_path

    try:
        settings = load_settings(config_path, search=False)
        result.settings = settings
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    if config_path is None:
        result.warnings.append("No envdeploy.yml found — using built-in defaults.")

    if not settings.workspace_base_path.is_dir():
        result.warnings.append(
            f"workspace_base does not exist: {settings.workspace_base_path}"
        )

    if settings.project_match_rules[-1] not in ("shallowest", "first"):
        result.warnings.append(
            "project_match_rules does not end with a tie-breaking rule "
            "(shallowest/first) — ambiguous names will abort the run."
        )

    if settings.startup.enabled and not settings.startup.command:
        result.warnings.append(
            "startup.command is empty — accepting the startup prompt will only warn."
        )

    dupes = {r for r in settings.project_match_rules if settings.project_match_rules.count(r) > 1}
    if dupes:
        result.warnings.append(f"Duplicate project match rules: {', '.join(sorted(dupes))}")

    result.valid = not result.errors
    return result
