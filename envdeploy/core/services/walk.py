"""
Deterministic directory walking with build-output pruning.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from pathlib import Path


def iter_files(root: Path, skip_dirs: Iterable[str] = ()) -> Iterator[tuple[Path, int]]:
    """Yield ``(path, depth)`` for every file under ``root``.

    Directories are visited in sorted order and pruned by
    case-insensitive name, so two walks of the same tree yield the
    same sequence.  ``depth`` is 1 for files directly in ``root``.
    """
    skip = {name.casefold() for name in skip_dirs}

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d.casefold() not in skip)
        current = Path(dirpath)
        depth = len(current.relative_to(root).parts) + 1
        for filename in sorted(filenames):
            yield current / filename, depth


def find_child(directory: Path, name: str, *, want_dir: bool) -> Path | None:
    """Case-insensitive lookup of a direct child of ``directory``."""
    exact = directory / name
    if (exact.is_dir() if want_dir else exact.is_file()):
        return exact

    if not directory.is_dir():
        return None

    wanted = name.casefold()
    for child in sorted(directory.iterdir()):
        if child.name.casefold() != wanted:
            continue
        if (child.is_dir() if want_dir else child.is_file()):
            return child
    return None
