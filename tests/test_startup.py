"""
Tests for the startup-project step — prompts, adapters, warnings.
"""

import io
import os
import sys
from pathlib import Path

from envdeploy.adapters.base import ExecutionContext
from envdeploy.adapters.ide import IdeCommandAdapter
from envdeploy.adapters.mock import MockAdapter
from envdeploy.core.models.action import Action
from envdeploy.core.models.artifacts import ProjectDescriptor
from envdeploy.core.models.settings import StartupSettings
from envdeploy.core.services.startup import (
    FixedPrompt,
    TimedConsolePrompt,
    register_startup_project,
)


def _project(tmp_path: Path) -> ProjectDescriptor:
    return ProjectDescriptor(
        name="Kernel.Service",
        loose_pattern="Service",
        file_path=tmp_path / "Kernel.Service.csproj",
        directory=tmp_path,
    )


# ── Prompts ──────────────────────────────────────────────────────────


class TestPrompts:
    def test_fixed_prompt_records_question(self):
        prompt = FixedPrompt(True)
        assert prompt.ask("Proceed?", 1.0).accepted is True
        assert prompt.questions == ["Proceed?"]

    def test_console_yes(self):
        prompt = TimedConsolePrompt(stream=io.StringIO("y\n"), require_tty=False)
        answer = prompt.ask("Proceed?", 2.0)
        assert answer.accepted is True
        assert answer.timed_out is False

    def test_console_anything_else_is_no(self):
        prompt = TimedConsolePrompt(stream=io.StringIO("maybe\n"), require_tty=False)
        assert prompt.ask("Proceed?", 2.0).accepted is False

    def test_console_not_a_tty_defaults_to_no(self):
        prompt = TimedConsolePrompt(stream=io.StringIO("y\n"))
        answer = prompt.ask("Proceed?", 2.0)
        assert answer.accepted is False
        assert answer.timed_out is False

    def test_console_timeout_defaults_to_no(self):
        read_fd, write_fd = os.pipe()
        stream = os.fdopen(read_fd)
        try:
            answer = TimedConsolePrompt(stream=stream, require_tty=False).ask("Proceed?", 0.1)
        finally:
            os.close(write_fd)  # unblocks the abandoned reader

        assert answer.accepted is False
        assert answer.timed_out is True


# ── register_startup_project ─────────────────────────────────────────


class TestRegisterStartupProject:
    def test_declined(self, tmp_path: Path):
        adapter = MockAdapter()
        outcome = register_startup_project(
            _project(tmp_path), tmp_path, StartupSettings(), FixedPrompt(False), adapter
        )
        assert outcome.asked is True
        assert outcome.registered is False
        assert adapter.call_count == 0

    def test_accepted(self, tmp_path: Path):
        adapter = MockAdapter()
        outcome = register_startup_project(
            _project(tmp_path), tmp_path, StartupSettings(), FixedPrompt(True), adapter
        )
        assert outcome.registered is True
        assert outcome.warning is None
        params = adapter.call_log[0].action.params
        assert params["project_name"] == "Kernel.Service"
        assert params["project_file"].endswith("Kernel.Service.csproj")

    def test_disabled_never_asks(self, tmp_path: Path):
        prompt = FixedPrompt(True)
        outcome = register_startup_project(
            _project(tmp_path), tmp_path, StartupSettings(enabled=False), prompt, MockAdapter()
        )
        assert outcome.asked is False
        assert prompt.questions == []

    def test_no_ide_is_warning(self, tmp_path: Path):
        outcome = register_startup_project(
            _project(tmp_path), tmp_path, StartupSettings(), FixedPrompt(True),
            MockAdapter(available=False),
        )
        assert outcome.registered is False
        assert "no running IDE" in outcome.warning

    def test_failure_is_warning(self, tmp_path: Path):
        adapter = MockAdapter()
        adapter.set_failure("DTE not registered")
        outcome = register_startup_project(
            _project(tmp_path), tmp_path, StartupSettings(), FixedPrompt(True), adapter
        )
        assert outcome.registered is False
        assert "failed: DTE not registered" in outcome.warning

    def test_timeout_is_warning(self, tmp_path: Path):
        adapter = MockAdapter()
        adapter.set_failure("slow", timed_out=True)
        outcome = register_startup_project(
            _project(tmp_path), tmp_path, StartupSettings(command_timeout=3), FixedPrompt(True), adapter
        )
        assert "timed out after 3s" in outcome.warning


# ── IdeCommandAdapter ────────────────────────────────────────────────


def _context(timeout: float = 10.0) -> ExecutionContext:
    return ExecutionContext(
        action=Action(
            id="startup:Kernel.Service",
            adapter="ide-command",
            params={"project_name": "Kernel.Service", "project_file": "x", "project_dir": "y"},
        ),
        timeout=timeout,
    )


class TestIdeCommandAdapter:
    def test_unconfigured_is_unavailable(self):
        adapter = IdeCommandAdapter("")
        assert adapter.is_available() is False
        receipt = adapter.execute(_context())
        assert receipt.status == "skipped"

    def test_unknown_executable_is_unavailable(self):
        assert IdeCommandAdapter("definitely-not-a-real-tool-xyz --go").is_available() is False

    def test_runs_command_with_placeholders(self):
        command = f'"{sys.executable}" -c "import sys; print(sys.argv[1])" {{project_name}}'
        receipt = IdeCommandAdapter(command).execute(_context())
        assert receipt.ok, receipt.error
        assert receipt.output == "Kernel.Service"

    def test_nonzero_exit_fails(self):
        command = f'"{sys.executable}" -c "import sys; sys.exit(3)"'
        receipt = IdeCommandAdapter(command).execute(_context())
        assert receipt.failed
        assert receipt.metadata["return_code"] == 3

    def test_timeout(self):
        command = f'"{sys.executable}" -c "import time; time.sleep(5)"'
        receipt = IdeCommandAdapter(command).execute(_context(timeout=0.3))
        assert receipt.failed
        assert receipt.timed_out is True
