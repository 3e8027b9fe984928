"""Tests for local file access and the save-with-backup helper."""

from __future__ import annotations

from pathlib import Path, PurePath

import pytest

from conftest import MemorySource
from typeseditor.errors import NotFoundError, SourceIOError
from typeseditor.sources import DirEntry, LocalFileSource, backup_path, save_with_backup


class TestLocalFileSource:
    def test_read_write(self, tmp_path: Path):
        target = tmp_path / "types.xml"
        source = LocalFileSource()
        source.write(target, b"<types/>")
        assert source.read(target) == b"<types/>"
        assert source.read(str(target)) == b"<types/>"

    def test_write_replaces_and_leaves_no_temp(self, tmp_path: Path):
        target = tmp_path / "types.xml"
        target.write_bytes(b"old")
        LocalFileSource().write(target, b"new")
        assert target.read_bytes() == b"new"
        assert list(tmp_path.glob("*.tmp")) == []

    def test_read_missing(self, tmp_path: Path):
        with pytest.raises(NotFoundError):
            LocalFileSource().read(tmp_path / "nope.xml")

    def test_not_found_is_file_not_found(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            LocalFileSource().read(tmp_path / "nope.xml")

    def test_write_into_missing_directory(self, tmp_path: Path):
        with pytest.raises(SourceIOError):
            LocalFileSource().write(tmp_path / "missing" / "types.xml", b"x")

    def test_list_dir(self, tmp_path: Path):
        (tmp_path / "db").mkdir()
        (tmp_path / "types.xml").write_bytes(b"")
        entries = sorted(LocalFileSource().list_dir(tmp_path), key=lambda e: e.name)
        assert entries == [DirEntry("db", True), DirEntry("types.xml", False)]

    def test_list_missing_dir(self, tmp_path: Path):
        with pytest.raises(NotFoundError):
            LocalFileSource().list_dir(tmp_path / "gone")


class TestBackup:
    def test_backup_path(self):
        assert backup_path("db/types.xml") == PurePath("db/types.xml.bak")
        assert backup_path(PurePath("/srv/types.xml")).name == "types.xml.bak"

    def test_first_save_has_no_backup(self, memory_source: MemorySource):
        save_with_backup(memory_source, "types.xml", b"new")
        assert memory_source.writes == ["types.xml"]

    def test_backup_holds_previous_content(self, memory_source: MemorySource):
        memory_source.files["types.xml"] = b"old"
        save_with_backup(memory_source, "types.xml", b"new")
        assert memory_source.files["types.xml.bak"] == b"old"
        assert memory_source.files["types.xml"] == b"new"

    def test_failed_backup_still_saves(self, memory_source: MemorySource):
        memory_source.files["types.xml"] = b"old"
        memory_source.fail_writes_to.add("types.xml.bak")
        save_with_backup(memory_source, "types.xml", b"new")
        assert memory_source.files["types.xml"] == b"new"

    def test_failed_primary_write_propagates(self, memory_source: MemorySource):
        memory_source.files["types.xml"] = b"old"
        memory_source.fail_writes_to.add("types.xml")
        with pytest.raises(SourceIOError):
            save_with_backup(memory_source, "types.xml", b"new")
        assert memory_source.files["types.xml"] == b"old"

    def test_local_backup(self, tmp_path: Path):
        target = tmp_path / "types.xml"
        target.write_bytes(b"old")
        save_with_backup(LocalFileSource(), target, b"new")
        assert (tmp_path / "types.xml.bak").read_bytes() == b"old"
        assert target.read_bytes() == b"new"
