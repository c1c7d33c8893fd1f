"""
Project resolver — workspace root and project file from loose input.

The workspace root is ``workspace_base / selector``.  The project is
the one project file (``*.csproj`` by default) whose name contains
the requested fragment, picked with the configured match rules.
"""

from __future__ import annotations

import logging
from pathlib import Path

from envdeploy.core.errors import AmbiguousMatch, ProjectNotFound, WorkspaceNotFound
from envdeploy.core.models.artifacts import ProjectDescriptor
from envdeploy.core.models.settings import DeploySettings
from envdeploy.core.services.matching import Candidate, resolve_unique
from envdeploy.core.services.walk import iter_files

logger = logging.getLogger(__name__)


def resolve_workspace_root(settings: DeploySettings, selector: str) -> Path:
    """Turn a workspace selector into an existing directory.

    An absolute selector is used as-is; anything else is taken
    relative to ``settings.workspace_base``.

    Raises:
        WorkspaceNotFound: If the directory does not exist.
    """
    root = settings.workspace_base_path / Path(selector).expanduser()
    if not root.is_dir():
        raise WorkspaceNotFound(
            selector, root,
            hint=f"Workspaces are looked up under {settings.workspace_base_path}",
        )
    return root.resolve()


def collect_project_candidates(
    workspace_root: Path,
    pattern: str,
    settings: DeploySettings,
) -> list[Candidate]:
    """All project files under the root whose filename contains ``pattern``."""
    needle = pattern.casefold()
    extensions = {ext.casefold() for ext in settings.project_extensions}

    candidates = []
    for path, depth in iter_files(workspace_root, settings.skip_dirs):
        if path.suffix.casefold() not in extensions:
            continue
        if needle not in path.name.casefold():
            continue
        candidates.append(Candidate(name=path.stem, path=path, depth=depth))
    return candidates


def find_project(
    workspace_root: Path,
    pattern: str,
    settings: DeploySettings,
) -> ProjectDescriptor:
    """Resolve exactly one project file for ``pattern``.

    Raises:
        ProjectNotFound: No project file name contains the pattern.
        AmbiguousMatch: Several do and no configured rule picks one.
    """
    candidates = collect_project_candidates(workspace_root, pattern, settings)
    logger.debug("Project '%s': %d candidate(s) under %s", pattern, len(candidates), workspace_root)

    if not candidates:
        raise ProjectNotFound(pattern, workspace_root)

    outcome = resolve_unique(
        candidates,
        pattern,
        settings.project_match_rules,
        namespace_prefix=settings.namespace_prefix,
    )
    if outcome is None:
        raise AmbiguousMatch(pattern, workspace_root, [c.path for c in candidates])

    chosen = outcome.candidate.path
    if outcome.heuristic:
        others = [str(c.path) for c in candidates if c.path != chosen]
        logger.warning(
            "Project '%s' is ambiguous — picked %s by rule '%s' (also matched: %s)",
            pattern, chosen, outcome.rule, ", ".join(others),
        )
    else:
        logger.info("Project '%s' → %s (rule: %s)", pattern, chosen, outcome.rule)

    return ProjectDescriptor(
        name=chosen.stem,
        loose_pattern=pattern,
        file_path=chosen,
        directory=chosen.parent,
        matched_by=outcome.rule,
    )
