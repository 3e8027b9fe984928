"""File picker state: directory browsing on the local or a remote host.

The picker consumes the same :mod:`actions` as the editor.  Activating a
file returns a :class:`FileSelection`; ToggleRemote opens an SSH form and,
once connected, browses the server through a shared :class:`SshBackend`.
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePath, PurePosixPath

from typeseditor.actions import Action, AnyAction, Input
from typeseditor.errors import TypesEditorError
from typeseditor.remote import DEFAULT_SSH_PORT, RemoteConfig, RemoteFileSource, SshBackend
from typeseditor.sources import DirEntry, FileSelection, FileSource, LocalFileSource

logger = logging.getLogger(__name__)

JUMP_SIZE = 5
PARENT_ENTRY = ".."


@dataclass
class RemoteForm:
    """Connection details typed into the SSH prompt."""

    host: str = ""
    user: str = ""
    port: str = str(DEFAULT_SSH_PORT)
    password: str = ""
    key_path: str = ""
    passphrase: str = ""
    field_index: int = 0

    FIELDS = ("host", "user", "port", "password", "key_path", "passphrase")
    LABELS = (
        "Host",
        "User",
        "Port",
        "Password (optional)",
        "Key Path (optional)",
        "Passphrase (optional)",
    )

    @classmethod
    def from_config(cls, config: RemoteConfig | None) -> RemoteForm:
        if config is None:
            try:
                user = getpass.getuser()
            except OSError:
                user = ""
            return cls(user=user)
        return cls(
            host=config.host,
            user=config.username,
            port=str(config.port),
            password=config.password or "",
            key_path=config.key_path or "",
            passphrase=config.passphrase or "",
        )

    def next_field(self) -> None:
        self.field_index = (self.field_index + 1) % len(self.FIELDS)

    def prev_field(self) -> None:
        self.field_index = (self.field_index - 1) % len(self.FIELDS)

    @property
    def active_name(self) -> str:
        return self.FIELDS[self.field_index]

    def push_char(self, char: str) -> None:
        setattr(self, self.active_name, getattr(self, self.active_name) + char)

    def pop_char(self) -> None:
        setattr(self, self.active_name, getattr(self, self.active_name)[:-1])

    def rows(self) -> list[tuple[str, str, bool]]:
        """``(label, value, active)`` for each form line."""
        return [
            (label, getattr(self, name), i == self.field_index)
            for i, (label, name) in enumerate(zip(self.LABELS, self.FIELDS))
        ]

    def to_config(self) -> RemoteConfig:
        try:
            port = int(self.port)
        except ValueError:
            port = DEFAULT_SSH_PORT
        return RemoteConfig(
            host=self.host,
            username=self.user,
            port=port,
            password=self.password or None,
            key_path=self.key_path or None,
            passphrase=self.passphrase or None,
        )


@dataclass
class PickerEntry:
    name: str
    is_dir: bool

    def label(self) -> str:
        if self.is_dir and self.name != PARENT_ENTRY:
            return f"{self.name}/"
        return self.name


def sort_entries(entries: list[PickerEntry]) -> list[PickerEntry]:
    """Directories first, then files, both case-insensitively by name."""
    return sorted(entries, key=lambda e: (not e.is_dir, e.name.lower()))


@dataclass
class FilePicker:
    local_root: Path
    remote_config: RemoteConfig | None = None
    connect: Callable[[RemoteConfig], SshBackend] = SshBackend.connect
    cwd: PurePath = field(init=False)
    entries: list[PickerEntry] = field(init=False, default_factory=list)
    selected: int = field(init=False, default=0)
    status: str = field(init=False, default="Press Enter to open, q to quit")
    source: FileSource = field(init=False, default_factory=LocalFileSource)
    form: RemoteForm | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        self.cwd = self.local_root
        self.refresh_entries()

    # ── State ───────────────────────────────────────────────────

    @property
    def is_remote(self) -> bool:
        return isinstance(self.source, RemoteFileSource)

    def is_prompt(self) -> bool:
        return self.form is not None

    def set_status(self, message: str) -> None:
        self.status = message

    def refresh_entries(self) -> None:
        """Re-list ``cwd``.

        Raises:
            TypesEditorError: If the directory cannot be listed.
        """
        listed: list[DirEntry] = self.source.list_dir(self.cwd)
        entries = sort_entries([PickerEntry(e.name, e.is_dir) for e in listed])
        if self.cwd.parent != self.cwd:
            entries.insert(0, PickerEntry(PARENT_ENTRY, True))
        self.entries = entries
        self.selected = 0

    # ── Actions ─────────────────────────────────────────────────

    def handle_action(self, action: AnyAction) -> FileSelection | None:
        if self.form is not None:
            self._handle_form(action)
            return None
        try:
            if action is Action.UP:
                self.previous()
            elif action is Action.DOWN:
                self.next()
            elif action is Action.PG_UP:
                self.jump(-JUMP_SIZE)
            elif action is Action.PG_DOWN:
                self.jump(JUMP_SIZE)
            elif action is Action.ACTIVATE:
                return self.enter_directory_or_select_file()
            elif action is Action.TOGGLE_REMOTE:
                self.toggle_remote()
        except TypesEditorError as err:
            self.status = str(err)
            logger.error("File picker: %s", err)
        return None

    def next(self) -> None:
        if self.entries:
            self.selected = (self.selected + 1) % len(self.entries)

    def previous(self) -> None:
        if self.entries:
            self.selected = (self.selected - 1) % len(self.entries)

    def jump(self, delta: int) -> None:
        if self.entries:
            self.selected = max(0, min(len(self.entries) - 1, self.selected + delta))

    def enter_directory_or_select_file(self) -> FileSelection | None:
        if not self.entries:
            return None
        entry = self.entries[self.selected]
        if entry.is_dir:
            previous = self.cwd
            self.cwd = self.cwd.parent if entry.name == PARENT_ENTRY else self.cwd / entry.name
            try:
                self.refresh_entries()
            except TypesEditorError:
                self.cwd = previous
                raise
            self.status = ""
            return None
        chosen = self.cwd / entry.name
        self.status = f"Selected file: {chosen} ({self.source.label})"
        return FileSelection(path=chosen, source=self.source)

    def toggle_remote(self) -> None:
        if self.is_remote:
            self.source.backend.close()
            self.source = LocalFileSource()
            self.cwd = self.local_root
            self.status = "Switched to local"
            self.refresh_entries()
        else:
            self.form = RemoteForm.from_config(self.remote_config)

    def _handle_form(self, action: AnyAction) -> None:
        form = self.form
        if isinstance(action, Input):
            form.push_char(action.char)
        elif action is Action.BACKSPACE:
            form.pop_char()
        elif action in (Action.UP, Action.PG_UP):
            form.prev_field()
        elif action in (Action.DOWN, Action.PG_DOWN, Action.TAB):
            form.next_field()
        elif action is Action.CANCEL:
            self.form = None
            self.status = "SSH connect cancelled"
        elif action is Action.ACTIVATE:
            self.form = None
            self.try_connect(form.to_config())

    def try_connect(self, config: RemoteConfig) -> bool:
        try:
            backend = self.connect(config)
        except TypesEditorError as err:
            self.status = f"SSH connect failed: {err}"
            logger.error("SSH connect to %s failed: %s", config.host, err)
            return False
        self.source = RemoteFileSource(backend)
        self.remote_config = config
        self.cwd = PurePosixPath("/")
        self.status = "Connected via SSH"
        try:
            self.refresh_entries()
        except TypesEditorError as err:
            self.entries = []
            self.status = f"Connected via SSH, listing failed: {err}"
        return True
