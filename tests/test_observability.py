"""
Tests for logging setup.
"""

import logging
from pathlib import Path

import pytest

from envdeploy.core.observability.logging_config import ENV_LEVEL, level_from_flags, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLevelFromFlags:
    def test_flags_in_precedence(self):
        assert level_from_flags(debug=True, verbose=True, quiet=True) == "DEBUG"
        assert level_from_flags(verbose=True, quiet=True) == "INFO"
        assert level_from_flags(quiet=True) == "ERROR"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv(ENV_LEVEL, "INFO")
        assert level_from_flags() == "INFO"

    def test_default(self, monkeypatch):
        monkeypatch.delenv(ENV_LEVEL, raising=False)
        assert level_from_flags() == "WARNING"


class TestSetupLogging:
    def test_console_level(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_unknown_level_is_warning(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler(self, tmp_path: Path):
        log_file = tmp_path / "envdeploy.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("envdeploy.test").debug("resolved project")
        for handler in root.handlers:
            handler.flush()

        assert "resolved project" in log_file.read_text(encoding="utf-8")
