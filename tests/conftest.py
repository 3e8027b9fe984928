"""Shared pytest fixtures for types.xml editor tests."""

from __future__ import annotations

from pathlib import Path, PurePath

import pytest

from typeseditor.editor import Editor
from typeseditor.errors import NotFoundError
from typeseditor.models import ElementKey, Field, TypeEntry, TypesDocument, default_fields
from typeseditor.sources import DirEntry, FileSelection, LocalFileSource
from typeseditor.types_io import parse_types

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class MemorySource:
    """In-memory FileSource that records every write."""

    label = "memory"

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})
        self.writes: list[str] = []
        self.fail_writes_to: set[str] = set()

    def read(self, path) -> bytes:
        try:
            return self.files[str(path)]
        except KeyError:
            raise NotFoundError(f"No such file: {path}") from None

    def write(self, path, data: bytes) -> None:
        from typeseditor.errors import SourceIOError

        if str(path) in self.fail_writes_to:
            raise SourceIOError(f"Cannot write {path}")
        self.writes.append(str(path))
        self.files[str(path)] = data

    def list_dir(self, path) -> list[DirEntry]:
        prefix = str(path).rstrip("/") + "/"
        names = {p[len(prefix):].split("/")[0] for p in self.files if p.startswith(prefix)}
        return [DirEntry(n, False) for n in sorted(names)]


@pytest.fixture
def small_types_path() -> Path:
    return FIXTURES_DIR / "small_types.xml"


@pytest.fixture
def malformed_types_path() -> Path:
    return FIXTURES_DIR / "malformed.xml"


@pytest.fixture
def small_doc(small_types_path: Path) -> TypesDocument:
    return parse_types(small_types_path.read_bytes())


@pytest.fixture
def memory_source() -> MemorySource:
    return MemorySource()


@pytest.fixture
def abc_doc() -> TypesDocument:
    """Three types A, B, C, each seeded with the default template."""
    return TypesDocument(
        types=[TypeEntry(name, default_fields()) for name in ("A", "B", "C")]
    )


@pytest.fixture
def editor() -> Editor:
    """An editor holding one type ``X`` with ``nominal=5``."""
    ed = Editor()
    ed.set_document(
        TypesDocument(types=[TypeEntry("X", [Field(ElementKey("nominal", 0), "5")])]),
        path=PurePath("types.xml"),
        source=MemorySource(),
    )
    return ed


@pytest.fixture
def file_editor(small_types_path: Path, tmp_path: Path) -> Editor:
    """An editor loaded from a copy of the small fixture on disk."""
    target = tmp_path / "types.xml"
    target.write_bytes(small_types_path.read_bytes())
    ed = Editor()
    ed.load(FileSelection(path=target, source=LocalFileSource()))
    return ed
