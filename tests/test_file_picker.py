"""Tests for the file picker: local browsing and the SSH connect form."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from typeseditor.actions import Action, Input
from typeseditor.errors import AuthFailedError, NotFoundError
from typeseditor.file_picker import FilePicker, PickerEntry, RemoteForm, sort_entries
from typeseditor.remote import RemoteConfig, RemoteFileSource
from typeseditor.sources import DirEntry, LocalFileSource


class FakeBackend:
    """Stands in for SshBackend; serves one remote directory tree."""

    def __init__(self, tree: dict[str, list[DirEntry]]) -> None:
        self.tree = tree
        self.closed = False

    def list_dir(self, path):
        try:
            return self.tree[str(path)]
        except KeyError:
            raise NotFoundError(f"No such directory: {path}") from None

    def read_file(self, path) -> bytes:
        return b"<types/>"

    def write_file(self, path, data: bytes) -> None:
        pass

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def root(tmp_path: Path) -> Path:
    (tmp_path / "mission").mkdir()
    (tmp_path / "mission" / "db").mkdir()
    (tmp_path / "mission" / "db" / "types.xml").write_bytes(b"<types/>")
    (tmp_path / "Zeta.txt").write_bytes(b"")
    (tmp_path / "alpha.xml").write_bytes(b"")
    (tmp_path / "Beta").mkdir()
    return tmp_path


def _names(picker: FilePicker) -> list[str]:
    return [e.name for e in picker.entries]


class TestSortEntries:
    def test_dirs_first_case_insensitive(self):
        entries = [
            PickerEntry("b.xml", False),
            PickerEntry("Zdir", True),
            PickerEntry("A.xml", False),
            PickerEntry("adir", True),
        ]
        assert [e.name for e in sort_entries(entries)] == ["adir", "Zdir", "A.xml", "b.xml"]

    def test_labels(self):
        assert PickerEntry("db", True).label() == "db/"
        assert PickerEntry("..", True).label() == ".."
        assert PickerEntry("types.xml", False).label() == "types.xml"


class TestLocalBrowsing:
    def test_initial_listing(self, root: Path):
        picker = FilePicker(root)
        assert _names(picker) == ["..", "Beta", "mission", "alpha.xml", "Zeta.txt"]
        assert picker.selected == 0
        assert picker.status == "Press Enter to open, q to quit"

    def test_wraps_both_ways(self, root: Path):
        picker = FilePicker(root)
        picker.handle_action(Action.UP)
        assert picker.selected == len(picker.entries) - 1
        picker.handle_action(Action.DOWN)
        assert picker.selected == 0

    def test_jump_clamps(self, root: Path):
        picker = FilePicker(root)
        picker.handle_action(Action.PG_DOWN)
        assert picker.selected == len(picker.entries) - 1
        picker.handle_action(Action.PG_UP)
        assert picker.selected == 0

    def test_enter_directory_and_select_file(self, root: Path):
        picker = FilePicker(root)
        picker.selected = _names(picker).index("mission")
        assert picker.handle_action(Action.ACTIVATE) is None
        assert picker.cwd == root / "mission"
        assert _names(picker) == ["..", "db"]

        picker.selected = 1
        picker.handle_action(Action.ACTIVATE)
        picker.selected = 1
        chosen = picker.handle_action(Action.ACTIVATE)
        assert chosen.path == root / "mission" / "db" / "types.xml"
        assert isinstance(chosen.source, LocalFileSource)
        assert picker.status.startswith("Selected file:")

    def test_parent_entry(self, root: Path):
        picker = FilePicker(root / "mission")
        picker.handle_action(Action.ACTIVATE)
        assert picker.cwd == root

    def test_unreadable_directory_keeps_cwd(self, root: Path):
        picker = FilePicker(root)
        picker.entries.append(PickerEntry("vanished", True))
        picker.selected = len(picker.entries) - 1
        assert picker.handle_action(Action.ACTIVATE) is None
        assert picker.cwd == root
        assert picker.status.startswith("No such directory")

    def test_no_parent_entry_at_filesystem_root(self, tmp_path: Path):
        picker = FilePicker(Path(tmp_path.anchor))
        assert ".." not in _names(picker)


class TestRemoteForm:
    def test_prefill_from_config(self):
        form = RemoteForm.from_config(RemoteConfig("host", "user", 2200, password="pw"))
        assert (form.host, form.user, form.port, form.password) == ("host", "user", "2200", "pw")

    def test_editing_active_field(self):
        form = RemoteForm()
        form.push_char("a")
        form.push_char("b")
        form.pop_char()
        form.next_field()
        form.push_char("u")
        assert form.host == "a"
        assert form.user == "u"
        assert [r[2] for r in form.rows()] == [False, True, False, False, False, False]

    def test_field_cycle_wraps(self):
        form = RemoteForm()
        form.prev_field()
        assert form.active_name == "passphrase"
        form.next_field()
        assert form.active_name == "host"

    def test_to_config(self):
        form = RemoteForm(host="h", user="u", port="x", key_path="/k")
        assert form.to_config() == RemoteConfig("h", "u", 22, key_path="/k")


class TestRemoteBrowsing:
    def _picker(self, root: Path, connect) -> FilePicker:
        picker = FilePicker(root, RemoteConfig("srv", "dayz"), connect=connect)
        picker.handle_action(Action.TOGGLE_REMOTE)
        assert picker.is_prompt()
        return picker

    def test_cancel_form(self, root: Path):
        picker = self._picker(root, connect=lambda config: pytest.fail("should not connect"))
        picker.handle_action(Action.CANCEL)
        assert not picker.is_prompt()
        assert picker.status == "SSH connect cancelled"
        assert not picker.is_remote

    def test_connect_and_browse(self, root: Path):
        backend = FakeBackend({"/": [DirEntry("srv", True)], "/srv": [DirEntry("types.xml", False)]})
        seen: list[RemoteConfig] = []

        def connect(config: RemoteConfig):
            seen.append(config)
            return backend

        picker = self._picker(root, connect)
        picker.handle_action(Action.TAB)
        picker.handle_action(Input("2"))
        picker.handle_action(Action.ACTIVATE)

        assert seen[0].username == "dayz2"
        assert picker.is_remote
        assert picker.status == "Connected via SSH"
        assert picker.cwd == PurePosixPath("/")
        assert _names(picker) == ["srv"]

        picker.handle_action(Action.ACTIVATE)
        chosen = picker.handle_action(Action.ACTIVATE)
        assert chosen is None  # ".." entry is listed first
        picker.handle_action(Action.ACTIVATE)
        picker.handle_action(Action.DOWN)
        chosen = picker.handle_action(Action.ACTIVATE)
        assert chosen.path == PurePosixPath("/srv/types.xml")
        assert isinstance(chosen.source, RemoteFileSource)

    def test_connect_failure(self, root: Path):
        def connect(config: RemoteConfig):
            raise AuthFailedError("SSH authentication failed: denied")

        picker = self._picker(root, connect)
        picker.handle_action(Action.ACTIVATE)
        assert picker.status.startswith("SSH connect failed")
        assert not picker.is_remote
        assert picker.cwd == root

    def test_toggle_back_to_local(self, root: Path):
        backend = FakeBackend({"/": []})
        picker = self._picker(root, lambda config: backend)
        picker.handle_action(Action.ACTIVATE)
        picker.handle_action(Action.TOGGLE_REMOTE)
        assert backend.closed
        assert not picker.is_remote
        assert picker.cwd == root
        assert picker.status == "Switched to local"
