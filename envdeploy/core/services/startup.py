"""
Startup project registration — the optional interactive last step.

Asks the operator whether the deployed project should become the
IDE's startup project.  The question times out to "no", and nothing
in here can fail the run: a missing IDE, a failed automation command
or an expired timeout all end up as a warning string on the outcome.

The question is asked through a ``Prompt`` so tests (and the
--startup/--no-startup flags) can inject a decided answer instead of
reading a real keyboard.
"""

from __future__ import annotations

import logging
import sys
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import IO

import click

from envdeploy.adapters.base import Adapter, ExecutionContext
from envdeploy.core.errors import ExternalFailureError, ExternalTimeoutError
from envdeploy.core.models.action import Action
from envdeploy.core.models.artifacts import ProjectDescriptor
from envdeploy.core.models.settings import StartupSettings

logger = logging.getLogger(__name__)

_YES = frozenset({"y", "yes"})

OPERATION = "Startup project registration"


@dataclass(frozen=True)
class PromptAnswer:
    accepted: bool
    timed_out: bool = False


class Prompt(ABC):
    """A yes/no question with a deadline."""

    @abstractmethod
    def ask(self, question: str, timeout: float) -> PromptAnswer:
        """Return the answer, or "no" with ``timed_out`` once the deadline passes."""


class FixedPrompt(Prompt):
    """Answers every question the same way without asking."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.questions: list[str] = []

    def ask(self, question: str, timeout: float) -> PromptAnswer:
        self.questions.append(question)
        return PromptAnswer(accepted=self.answer)


class TimedConsolePrompt(Prompt):
    """Reads a y/N answer from a stream on a daemon thread.

    The reader thread is abandoned (not joined) when the deadline
    passes; being a daemon it never keeps the process alive.
    """

    def __init__(self, stream: IO[str] | None = None, require_tty: bool = True):
        self._stream = stream
        self._require_tty = require_tty

    def ask(self, question: str, timeout: float) -> PromptAnswer:
        stream = self._stream if self._stream is not None else sys.stdin

        if self._require_tty and not (hasattr(stream, "isatty") and stream.isatty()):
            logger.debug("Not a terminal — answering 'no' to: %s", question)
            return PromptAnswer(accepted=False)

        click.echo(f"{question} [y/N] (no in {timeout:g}s): ", nl=False, err=True)

        reply: list[str] = []
        done = threading.Event()

        def _read() -> None:
            try:
                reply.append(stream.readline())
            except (OSError, ValueError) as e:
                logger.debug("Prompt read failed: %s", e)
            finally:
                done.set()

        threading.Thread(target=_read, name="startup-prompt", daemon=True).start()

        if not done.wait(timeout):
            click.echo("", err=True)
            logger.info("No answer within %ss — defaulting to 'no'", timeout)
            return PromptAnswer(accepted=False, timed_out=True)

        answer = reply[0].strip().lower() if reply else ""
        return PromptAnswer(accepted=answer in _YES)


@dataclass
class StartupOutcome:
    asked: bool = False
    accepted: bool = False
    timed_out: bool = False
    registered: bool = False
    warning: str | None = None

    def to_dict(self) -> dict:
        return {
            "asked": self.asked,
            "accepted": self.accepted,
            "timed_out": self.timed_out,
            "registered": self.registered,
            "warning": self.warning,
        }


def register_startup_project(
    project: ProjectDescriptor,
    workspace_root: Path,
    settings: StartupSettings,
    prompt: Prompt,
    adapter: Adapter,
) -> StartupOutcome:
    """Offer to make ``project`` the IDE's startup project."""
    outcome = StartupOutcome()
    if not settings.enabled:
        return outcome

    answer = prompt.ask(f"Set {project.name} as the startup project?", settings.prompt_timeout)
    outcome.asked = True
    outcome.accepted = answer.accepted
    outcome.timed_out = answer.timed_out
    if not answer.accepted:
        return outcome

    if not adapter.is_available():
        outcome.warning = str(ExternalFailureError(OPERATION, "no running IDE automation available"))
        logger.warning(outcome.warning)
        return outcome

    context = ExecutionContext(
        action=Action(
            id=f"startup:{project.name}",
            adapter=adapter.name,
            params={
                "project_file": str(project.file_path),
                "project_name": project.name,
                "project_dir": str(project.directory),
            },
        ),
        workspace_root=str(workspace_root),
        timeout=settings.command_timeout,
    )
    receipt = adapter.execute(context)

    if receipt.ok:
        outcome.registered = True
        logger.info("%s is now the startup project", project.name)
    elif receipt.timed_out:
        outcome.warning = str(ExternalTimeoutError(OPERATION, settings.command_timeout))
    elif receipt.failed:
        outcome.warning = str(ExternalFailureError(OPERATION, receipt.error or "unknown error"))
    else:
        outcome.warning = str(ExternalFailureError(OPERATION, receipt.output or "skipped"))

    if outcome.warning:
        logger.warning(outcome.warning)
    return outcome
