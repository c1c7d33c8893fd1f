"""
IDE command adapter — ask a running IDE to switch its startup project.

The IDE automation itself is an external script (typically a
PowerShell snippet driving the IDE's automation object).  This
adapter only runs the configured command with a hard timeout:

    startup:
      command: >-
        powershell -NoProfile -File C:\\Tools\\Set-StartupProject.ps1
        -Project "{project_file}"
      command_timeout: 30

Placeholders: project_file, project_name, project_dir, workspace_root.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
import sys
import time

from envdeploy.adapters.base import Adapter, ExecutionContext
from envdeploy.core.models.action import Receipt

logger = logging.getLogger(__name__)


class IdeCommandAdapter(Adapter):
    """Run the configured IDE automation command.

    Action params:
        project_file, project_name, project_dir (str): template values.
    """

    def __init__(self, command: str = ""):
        self._command = command.strip()

    @property
    def name(self) -> str:
        return "ide-command"

    def _executable(self) -> str | None:
        if not self._command:
            return None
        try:
            parts = shlex.split(self._command, posix=sys.platform != "win32")
        except ValueError:
            return None
        return parts[0].strip('"') if parts else None

    def is_available(self) -> bool:
        executable = self._executable()
        return executable is not None and shutil.which(executable) is not None

    def render(self, context: ExecutionContext) -> str:
        values = {"workspace_root": context.workspace_root, **context.action.params}
        return self._command.format(**values)

    def execute(self, context: ExecutionContext) -> Receipt:
        action_id = context.action.id

        if not self.is_available():
            return Receipt.skip(
                adapter=self.name,
                action_id=action_id,
                reason="No IDE automation command available",
            )

        try:
            command = self.render(context)
        except (KeyError, IndexError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=f"Bad placeholder in startup command: {e}",
            )

        logger.debug("Executing: %s (timeout=%ss)", command, context.timeout)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=context.timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=f"Command timed out after {context.timeout:g}s",
                timed_out=True,
                metadata={"command": command},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=action_id,
                error=f"Command execution error: {e}",
                metadata={"command": command},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=action_id,
                output=result.stdout.strip(),
                duration_ms=elapsed_ms,
                metadata={"command": command},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=action_id,
            error=result.stderr.strip() or f"Command exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            metadata={"command": command, "return_code": result.returncode},
        )
