"""
Tests for file persistence — atomic writes and backups.
"""

from datetime import datetime
from pathlib import Path

import pytest

from envdeploy.core.errors import WriteFailureError
from envdeploy.core.persistence.files import atomic_write_bytes, backup_file, backup_path_for


class TestAtomicWrite:
    def test_replaces_content(self, tmp_path: Path):
        path = tmp_path / "Environment.config"
        path.write_bytes(b"old")

        atomic_write_bytes(path, b"new")

        assert path.read_bytes() == b"new"

    def test_no_temp_files_left(self, tmp_path: Path):
        atomic_write_bytes(tmp_path / "a.config", b"x")
        assert [p.name for p in tmp_path.iterdir()] == ["a.config"]

    def test_creates_parent(self, tmp_path: Path):
        path = tmp_path / "sub" / "a.config"
        atomic_write_bytes(path, b"x")
        assert path.read_bytes() == b"x"

    def test_unwritable_location(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("not a dir")

        with pytest.raises(WriteFailureError) as exc:
            atomic_write_bytes(blocker / "a.config", b"x")

        assert exc.value.kind == "write_failure"
        assert "a.config" in str(exc.value)

    def test_target_is_directory(self, tmp_path: Path):
        target = tmp_path / "a.config"
        target.mkdir()

        with pytest.raises(WriteFailureError):
            atomic_write_bytes(target, b"x")
        assert [p.name for p in tmp_path.iterdir()] == ["a.config"]


class TestBackup:
    def test_name(self):
        stamp = datetime(2024, 1, 31, 14, 25, 0)
        path = backup_path_for(Path("/w/Environment.config"), stamp)
        assert path == Path("/w/Environment.config.20240131-142500.bak")

    def test_copies_content(self, tmp_path: Path):
        path = tmp_path / "Environment.config"
        path.write_text("original")

        backup = backup_file(path, datetime(2024, 1, 31, 14, 25, 0))

        assert backup.read_text() == "original"
        assert path.read_text() == "original"

    def test_existing_backup_never_overwritten(self, tmp_path: Path):
        stamp = datetime(2024, 1, 31, 14, 25, 0)
        path = tmp_path / "Environment.config"

        path.write_text("original")
        first = backup_file(path, stamp)
        path.write_text("second")
        second = backup_file(path, stamp)
        path.write_text("third")
        third = backup_file(path, stamp)

        assert first.name == "Environment.config.20240131-142500.bak"
        assert second.name == "Environment.config.20240131-142500-1.bak"
        assert third.name == "Environment.config.20240131-142500-2.bak"
        assert [p.read_text() for p in (first, second, third)] == ["original", "second", "third"]

    def test_missing_source(self, tmp_path: Path):
        assert backup_file(tmp_path / "missing.config") is None
