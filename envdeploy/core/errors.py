"""
Error taxonomy for the deploy pipeline.

Resolution errors (every ``NotFoundError`` variant, ``AmbiguousMatch``)
abort the run before anything is written.  ``CorruptMetadataError``
and ``TransformError`` are fatal too.  ``WriteFailureError`` is fatal
for the target config and a warning for metadata documents.  The two
``External*`` errors are only ever reported as warnings.

Every error names the artifact it was looking for and where it looked,
so the operator can fix the workspace instead of guessing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class DeployError(Exception):
    """Base class for all pipeline failures."""

    kind = "deploy"

    def __init__(self, message: str, *, path: Path | str | None = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "path": str(self.path) if self.path else None,
        }


# ── Resolution ──────────────────────────────────────────────────


class NotFoundError(DeployError):
    """An artifact the pipeline needs does not exist."""

    kind = "not_found"
    artifact = "artifact"

    def __init__(self, name: str, searched: Path | str, hint: str = ""):
        self.name = name
        self.searched = Path(searched)
        message = f"{self.artifact} '{name}' not found (searched {self.searched})"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message, path=self.searched)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["artifact"] = self.artifact
        data["name"] = self.name
        data["searched"] = str(self.searched)
        return data


class WorkspaceNotFound(NotFoundError):
    kind = "workspace"
    artifact = "Workspace root"


class ProjectNotFound(NotFoundError):
    kind = "project"
    artifact = "Project matching"


class DeployDirNotFound(NotFoundError):
    kind = "deploy_dir"
    artifact = "Deployment directory"


class InstanceNotFound(NotFoundError):
    kind = "instance"
    artifact = "Service instance"


class EnvironmentConfigNotFound(NotFoundError):
    kind = "environment_config"
    artifact = "Environment config"


class TargetConfigNotFound(NotFoundError):
    kind = "target_config"
    artifact = "Target config file"


class AmbiguousMatch(DeployError):
    """Configured match rules could not narrow candidates to one."""

    kind = "ambiguous"

    def __init__(self, pattern: str, searched: Path | str, candidates: list[Path]):
        self.pattern = pattern
        self.searched = Path(searched)
        self.candidates = list(candidates)
        listing = ", ".join(str(c) for c in self.candidates)
        super().__init__(
            f"'{pattern}' matches {len(self.candidates)} candidates under "
            f"{self.searched} and no match rule picked one: {listing}",
            path=self.searched,
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["candidates"] = [str(c) for c in self.candidates]
        return data


# ── Content & documents ─────────────────────────────────────────


class TransformError(DeployError):
    """Config content could not be decoded as UTF-8 text."""

    kind = "transform"


class CorruptMetadataError(DeployError):
    """A project metadata document is not well-formed XML."""

    kind = "corrupt_metadata"

    def __init__(self, path: Path | str, detail: str):
        self.detail = detail
        super().__init__(f"Cannot parse metadata document {path}: {detail}", path=path)


class WriteFailureError(DeployError):
    """A file could not be written (permissions, lock, disk)."""

    kind = "write_failure"

    def __init__(self, path: Path | str, detail: str):
        self.detail = detail
        super().__init__(f"Cannot write {path}: {detail}", path=path)


# ── External collaborators ──────────────────────────────────────


class ExternalTimeoutError(DeployError):
    """A bounded wait on an external step expired."""

    kind = "external_timeout"

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout:g}s")


class ExternalFailureError(DeployError):
    """An external step (IDE automation, remote call) failed."""

    kind = "external_failure"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation} failed: {detail}")
