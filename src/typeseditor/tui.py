"""Textual front-end: file picker screen and two-pane editor screen.

The app only translates key events into :mod:`actions` and renders the
state held by :class:`FilePicker` and :class:`Editor`; all behaviour lives
in those two objects.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Static

from typeseditor import config
from typeseditor.actions import Action, AnyAction, Input
from typeseditor.editor import Editor
from typeseditor.errors import TypesEditorError
from typeseditor.field_help import help_text
from typeseditor.file_picker import FilePicker
from typeseditor.models import AttributeKey
from typeseditor.remote import RemoteConfig
from typeseditor.selection import EditTarget, Focus

logger = logging.getLogger(__name__)

# Keys that keep their meaning while free text is being typed
_TEXT_ENTRY_KEYS: dict[str, Action] = {
    "enter": Action.ACTIVATE,
    "escape": Action.CANCEL,
    "backspace": Action.BACKSPACE,
    "tab": Action.TAB,
    "up": Action.UP,
    "down": Action.DOWN,
}

EDITOR_HELP_ACTIONS = (
    "up", "down", "pg_up", "pg_down", "left", "right",
    "activate", "cancel", "toggle_select",
    "add", "add_attribute", "copy", "delete",
    "save", "undo", "redo", "help", "quit",
)

PICKER_HELP_ACTIONS = (
    "up", "down", "pg_up", "pg_down", "activate",
    "toggle_remote", "tab", "help", "quit",
)


def build_help(title: str, actions: tuple[str, ...]) -> str:
    """Help overlay text listing the keys currently bound to *actions*."""
    lines = [title, ""]
    for action in actions:
        keys = ", ".join(config.get_keys(action)) or "(unbound)"
        lines.append(f"{keys:<18} {config.ACTION_LABELS.get(action, action)}")
    return "\n".join(lines)


def map_key(key: str, character: str | None, text_entry: bool) -> AnyAction:
    """Translate a textual key event into an action."""
    if text_entry:
        if key in _TEXT_ENTRY_KEYS:
            return _TEXT_ENTRY_KEYS[key]
        if character is not None and character.isprintable():
            return Input(character)
        return Action.NONE

    name = config.action_for_key(key)
    if name is None and character:
        name = config.action_for_key(character)
    if name is not None:
        try:
            return Action(name)
        except ValueError:
            logger.warning("Key %r bound to unknown action %r", key, name)
    if character is not None and character.isprintable():
        return Input(character)
    return Action.NONE


def window(count: int, selected: int, height: int) -> range:
    """Visible slice of a list of *count* rows that keeps *selected* in view."""
    height = max(1, height)
    start = max(0, min(selected - height // 2, count - height))
    return range(start, min(count, start + height))


def input_title(editor: Editor) -> str:
    if editor.pending_add is not None:
        attribute = editor.pending_add.attribute_of is not None
    else:
        current = editor.current_field()
        attribute = current is not None and isinstance(current.key, AttributeKey)
    if editor.editing_target is EditTarget.TYPE_NAME:
        return "Type Name"
    if editor.editing_target is EditTarget.FIELD_NAME:
        return "Attribute Name" if attribute else "Field Name"
    if editor.editing_target is EditTarget.FIELD_VALUE:
        return "Attribute Value" if attribute else "Field Value"
    return "Input"


class TypesEditorApp(App):
    CSS = """
    Screen { layers: base overlay; }
    #header, #status { height: 3; border: round $accent; padding: 0 1; }
    #body { height: 1fr; }
    #types { width: 35%; border: round $primary; }
    #fields { width: 45%; border: round $primary; }
    #tips { width: 20%; border: round $primary; padding: 0 1; }
    #overlay {
        layer: overlay;
        display: none;
        width: 70%;
        height: auto;
        margin: 4 8;
        padding: 1 2;
        border: double $warning;
        background: $panel;
    }
    """

    def __init__(self, start_dir: Path, remote_config: RemoteConfig | None = None) -> None:
        super().__init__()
        self.picker = FilePicker(start_dir, remote_config)
        self.editor = Editor()
        self.in_editor = False
        self.show_help = False

    def compose(self) -> ComposeResult:  # noqa: D401 - Textual API
        yield Static(id="header")
        with Horizontal(id="body"):
            yield Static(id="types")
            yield Static(id="fields")
            yield Static(id="tips")
        yield Static(id="status")
        yield Static(id="overlay")

    def on_mount(self) -> None:
        self.call_after_refresh(self.refresh_view)

    def on_resize(self, event: events.Resize) -> None:
        self.call_after_refresh(self.refresh_view)

    # ── Input ───────────────────────────────────────────────────

    def _text_entry(self) -> bool:
        if self.in_editor:
            return self.editor.is_editing()
        return self.picker.is_prompt()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        text_entry = self._text_entry()
        action = map_key(event.key, event.character, text_entry)
        if action is Action.QUIT:
            self.exit(0)
            return
        if action is Action.HELP:
            self.show_help = not self.show_help
        elif self.in_editor:
            self.editor.handle_action(action)
        else:
            self._picker_action(action)
        self.refresh_view()

    def _picker_action(self, action: AnyAction) -> None:
        chosen = self.picker.handle_action(action)
        if chosen is None:
            return
        try:
            self.editor.load(chosen)
        except TypesEditorError as err:
            self.picker.set_status(f"Failed to open file: {err}")
            return
        self.in_editor = True

    # ── Rendering ───────────────────────────────────────────────

    def refresh_view(self) -> None:
        if self.in_editor:
            self._render_editor()
        else:
            self._render_picker()

    def _pane(self, widget_id: str, title: str, rows: list[str], selected: int, active: bool) -> None:
        widget = self.query_one(f"#{widget_id}", Static)
        widget.border_title = title
        body = Text()
        for i in window(len(rows), selected, widget.size.height - 2):
            style = "bold reverse" if i == selected and active else ("bold" if i == selected else "")
            marker = "▶ " if i == selected else "  "
            body.append(f"{marker}{rows[i]}\n", style=style)
        widget.update(body)

    def _overlay(self, text: str | None, title: str = "") -> None:
        overlay = self.query_one("#overlay", Static)
        overlay.display = text is not None
        overlay.border_title = title
        overlay.update(Text(text or ""))

    def _render_picker(self) -> None:
        picker = self.picker
        self.query_one("#header", Static).update(Text(f"Current directory: {picker.cwd}"))
        self._pane("types", "File Picker", [e.label() for e in picker.entries], picker.selected, True)
        self._pane("fields", "", [], 0, False)
        self.query_one("#tips", Static).update("")
        status = picker.status or "No file selected"
        self.query_one("#status", Static).update(
            Text(f"Help: ? | Remote: r | Quit: q | Source: {picker.source.label} | Status: {status}")
        )
        if picker.form is not None:
            lines = [
                f"{'>' if active else ' '} {label}: {value}"
                for label, value, active in picker.form.rows()
            ]
            self._overlay(
                "Connect via SSH\nEnter details (leave password empty if using keys)\n\n"
                + "\n".join(lines)
                + "\n\nEnter to connect, Esc to cancel",
                "SSH Connect",
            )
        elif self.show_help:
            self._overlay(build_help("File Picker Help", PICKER_HELP_ACTIONS), "Help")
        else:
            self._overlay(None)

    def _render_editor(self) -> None:
        editor = self.editor
        sel = editor.selection
        if editor.path is not None:
            header = f"Editing: {editor.path} ({editor.source.label})"
        else:
            header = "No file loaded"
        self.query_one("#header", Static).update(Text(header))

        if sel.multi_select:
            type_rows = [
                f"{'[x]' if i in sel.selected_types else '[ ]'} {t.name}"
                for i, t in enumerate(editor.types)
            ]
        else:
            type_rows = [t.name for t in editor.types]
        self._pane("types", "Types", type_rows, sel.selected_type, sel.focus is Focus.TYPE_LIST)
        field_rows = [f"{f.key.label()}: {f.value}" for f in editor.current_fields()]
        self._pane(
            "fields",
            "Fields",
            field_rows,
            sel.selected_field,
            sel.focus in (Focus.FIELD_LIST, Focus.EDITING),
        )

        tips = self.query_one("#tips", Static)
        tips.border_title = "Tips"
        current = editor.current_field()
        tips.update(Text(help_text(current.key) if current is not None else ""))

        if editor.is_editing():
            footer = f"Help: ? | Quit: q | Status: editing ({editor.input_buffer})"
        elif sel.multi_select:
            footer = f"Help: ? | Quit: q | Status: {editor.status} | Multi-select: {len(sel.selected_types)}"
        else:
            footer = f"Help: ? | Quit: q | Status: {editor.status}"
        self.query_one("#status", Static).update(Text(footer))

        if editor.is_editing():
            self._overlay(
                f"{input_title(editor)}\n\n{editor.input_buffer}\n\nEnter to accept, Esc to cancel",
                "Edit",
            )
        elif self.show_help:
            self._overlay(build_help("Editor Help", EDITOR_HELP_ACTIONS), "Help")
        else:
            self._overlay(None)
