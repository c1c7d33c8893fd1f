"""
File persistence — atomic writes and timestamped backups.

Writes go to a temp file in the target's directory and are renamed
over the target, so an interrupted run never leaves a half-written
config or project file behind.  Every OSError surfaces as
WriteFailureError naming the file.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

from envdeploy.core.errors import WriteFailureError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"
BACKUP_STAMP = "%Y%m%d-%H%M%S"
MAX_BACKUPS_PER_STAMP = 1000


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` via temp-file-then-rename.

    Raises:
        WriteFailureError: If the directory is not writable or the
            target is locked.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}_", suffix=".tmp")
    except OSError as e:
        raise WriteFailureError(path, str(e)) from e

    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
        logger.debug("Wrote %d bytes to %s", len(data), path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise WriteFailureError(path, str(e)) from e


def backup_path_for(path: Path, now: datetime | None = None, counter: int = 0) -> Path:
    """``Environment.config`` → ``Environment.config.20240131-142500.bak``.

    A non-zero ``counter`` gives ``…20240131-142500-1.bak`` for a second
    backup taken within the same second.
    """
    stamp = (now or datetime.now()).strftime(BACKUP_STAMP)
    if counter:
        stamp = f"{stamp}-{counter}"
    return path.with_name(f"{path.name}.{stamp}{BACKUP_SUFFIX}")


def backup_file(path: Path, now: datetime | None = None) -> Path | None:
    """Copy ``path`` next to itself with a timestamp suffix.

    An existing backup is never overwritten: the file is created
    exclusively and a counter is appended on collision.

    Returns:
        The backup path, or None when there is nothing to back up.

    Raises:
        WriteFailureError: If the copy cannot be made.
    """
    if not path.is_file():
        return None

    for counter in range(MAX_BACKUPS_PER_STAMP):
        target = backup_path_for(path, now, counter)
        try:
            with open(path, "rb") as src, open(target, "xb") as dst:
                shutil.copyfileobj(src, dst)
        except FileExistsError:
            continue
        except OSError as e:
            raise WriteFailureError(target, str(e)) from e

        try:
            shutil.copystat(path, target)
        except OSError as e:
            logger.debug("Could not copy timestamps to %s: %s", target.name, e)

        logger.info("Backed up %s → %s", path.name, target.name)
        return target

    raise WriteFailureError(
        backup_path_for(path, now),
        f"{MAX_BACKUPS_PER_STAMP} backups already exist for this timestamp",
    )
