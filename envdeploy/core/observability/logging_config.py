"""
Logging configuration — one-time setup for the CLI process.

Every module logs through ``logging.getLogger(__name__)``; this module
only decides where records go and how they look.

Level precedence:
    --debug / --verbose / --quiet  >  ENVDEPLOY_LOG_LEVEL  >  WARNING

A file copy of the log can be requested with ENVDEPLOY_LOG_FILE
(level via ENVDEPLOY_LOG_FILE_LEVEL, defaults to the console level).
"""

from __future__ import annotations

import logging
import os
import sys

# ── Format strings ──────────────────────────────────────────────

# WARNING and above: message only
_FMT_MINIMAL = "%(message)s"

# INFO: timestamp and logger name
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# DEBUG / file: full location
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

_DATEFMT_CONSOLE = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

ENV_LEVEL = "ENVDEPLOY_LOG_LEVEL"
ENV_FILE = "ENVDEPLOY_LOG_FILE"
ENV_FILE_LEVEL = "ENVDEPLOY_LOG_FILE_LEVEL"


def level_from_flags(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level name from CLI flags, falling back to the env var."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file to append to.
        log_file_level: Level for the file handler. Defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        formatter = logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_CONSOLE)
    elif numeric_level <= logging.INFO:
        formatter = logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_CONSOLE)
    else:
        formatter = logging.Formatter(_FMT_MINIMAL)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value (unknown names → WARNING)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
