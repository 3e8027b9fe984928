"""Editor state and command engine.

The :class:`Editor` owns the loaded document, the selection, the undo
history and the free-text input buffer.  It consumes :mod:`actions` from
the front-end and reports the outcome of every command on ``status``.
Every mutating command records an undo frame before it touches the
document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePath

from typeseditor.actions import Action, AnyAction, Input
from typeseditor.errors import TypesEditorError
from typeseditor.history import History, Snapshot
from typeseditor.models import (
    AttributeKey,
    ElementKey,
    Field,
    TypeEntry,
    TypesDocument,
    default_fields,
)
from typeseditor.selection import (
    EditTarget,
    Focus,
    Selection,
    clamp_after_removal,
    step_index,
)
from typeseditor.sources import FileSelection, FileSource, LocalFileSource
from typeseditor.types_io import read_types, write_types

logger = logging.getLogger(__name__)

NEW_TYPE_NAME = "new_type"
NEW_FIELD_NAME = "new_field"
NEW_ATTR_NAME = "new_attr"
PAGE_SIZE = 10

MULTI_EDIT_DISABLED = "Multi-select: editing disabled"


@dataclass
class PendingAdd:
    """A batch add waiting for its name and then its value.

    ``attribute_of`` is the ``(element, index)`` group the new attribute
    joins; None means a new element field.
    """

    attribute_of: tuple[str, int] | None = None
    name: str | None = None

    @property
    def label(self) -> str:
        return "field" if self.attribute_of is None else "attribute"

    def build_field(self, entry: TypeEntry, value: str) -> Field:
        name = self.name if self.name is not None else NEW_FIELD_NAME
        if self.attribute_of is None:
            return Field(ElementKey(name, entry.element_count(name)), value)
        element, index = self.attribute_of
        return Field(AttributeKey(element, index, name), value)


class Editor:
    def __init__(self) -> None:
        self.path: PurePath | None = None
        self.source: FileSource = LocalFileSource()
        self.document = TypesDocument()
        self.selection = Selection()
        self.history = History(self)
        self.editing_target: EditTarget | None = None
        self.pending_add: PendingAdd | None = None
        self.input_buffer = ""
        self.status = "Load a file to begin"

    # ── Loading ─────────────────────────────────────────────────

    def load(self, selection: FileSelection) -> None:
        """Read and parse *selection*; on failure the current state stays.

        Raises:
            TypesEditorError: If the file cannot be read or parsed.
        """
        try:
            document = read_types(selection.source, selection.path)
        except TypesEditorError as err:
            self.status = f"Failed to open file: {err}"
            logger.error("Loading %s failed: %s", selection.path, err)
            raise
        self.set_document(document, path=selection.path, source=selection.source)
        logger.info("Loaded %s (%s)", selection.path, selection.source.label)

    def set_document(
        self,
        document: TypesDocument,
        *,
        path: PurePath | None = None,
        source: FileSource | None = None,
    ) -> None:
        """Replace the document and reset selection, history and input."""
        self.path = path
        if source is not None:
            self.source = source
        self.document = document
        self.selection.reset()
        self.history.clear()
        self.editing_target = None
        self.pending_add = None
        self.input_buffer = ""
        self.status = "Loaded file"

    # ── Read-only accessors ─────────────────────────────────────

    @property
    def types(self) -> list[TypeEntry]:
        return self.document.types

    @property
    def focus(self) -> Focus:
        return self.selection.focus

    def is_editing(self) -> bool:
        return self.selection.focus is Focus.EDITING

    def current_type(self) -> TypeEntry | None:
        if self.selection.selected_type < len(self.types):
            return self.types[self.selection.selected_type]
        return None

    def current_fields(self) -> list[Field]:
        entry = self.current_type()
        return entry.fields if entry is not None else []

    def current_field(self) -> Field | None:
        fields = self.current_fields()
        if self.selection.selected_field < len(fields):
            return fields[self.selection.selected_field]
        return None

    # ── Action dispatch ─────────────────────────────────────────

    def handle_action(self, action: AnyAction) -> None:
        if self.is_editing():
            self._handle_editing(action)
            return

        sel = self.selection
        if action is Action.UP:
            self.move_selection(-1)
        elif action is Action.DOWN:
            self.move_selection(1)
        elif action is Action.PG_UP:
            self.move_selection(-PAGE_SIZE)
        elif action is Action.PG_DOWN:
            self.move_selection(PAGE_SIZE)
        elif action is Action.LEFT:
            sel.focus = Focus.TYPE_LIST
        elif action is Action.RIGHT:
            if self.types:
                sel.focus = Focus.FIELD_LIST
        elif action is Action.ACTIVATE:
            if sel.multi_select:
                self.status = MULTI_EDIT_DISABLED
            else:
                self.begin_editing()
        elif action is Action.ADD:
            self.add()
        elif action is Action.ADD_ATTRIBUTE:
            self.add_attribute()
        elif action is Action.COPY:
            if sel.multi_select:
                self.status = MULTI_EDIT_DISABLED
            else:
                self.copy()
        elif action is Action.DELETE:
            if sel.multi_select:
                self.delete_multi()
            else:
                self.delete()
        elif action is Action.UNDO:
            self.undo()
        elif action is Action.REDO:
            self.redo()
        elif action is Action.SAVE:
            self.save()
        elif action is Action.TOGGLE_SELECT:
            self.toggle_type_selection()
        elif action is Action.CANCEL:
            self.clear_multi_select()

    def _handle_editing(self, action: AnyAction) -> None:
        if isinstance(action, Input):
            self.input_buffer += action.char
        elif action is Action.BACKSPACE:
            self.input_buffer = self.input_buffer[:-1]
        elif action is Action.ACTIVATE:
            if not self._apply_input():
                self._stop_editing()
        elif action is Action.CANCEL:
            self._stop_editing()
            self.status = "Edit cancelled"

    # ── Navigation ──────────────────────────────────────────────

    def move_selection(self, delta: int) -> None:
        sel = self.selection
        if sel.focus is Focus.TYPE_LIST:
            if not self.types:
                return
            sel.selected_type = step_index(sel.selected_type, delta, len(self.types))
            sel.selected_field = 0
        elif sel.focus is Focus.FIELD_LIST:
            count = len(self.current_fields())
            if count == 0:
                return
            sel.selected_field = step_index(sel.selected_field, delta, count)

    def toggle_type_selection(self) -> None:
        sel = self.selection
        if sel.focus is not Focus.TYPE_LIST or not self.types:
            return
        sel.toggle_type(sel.selected_type)
        if sel.multi_select:
            self.status = f"Selected {len(sel.selected_types)} types"
        else:
            self.status = "Multi-select cleared"

    def clear_multi_select(self) -> None:
        if self.selection.multi_select:
            self.selection.clear_multi()
            self.status = "Multi-select cleared"

    # ── Editing session ─────────────────────────────────────────

    def begin_editing(self) -> None:
        sel = self.selection
        if sel.focus is Focus.TYPE_LIST:
            entry = self.current_type()
            if entry is not None:
                self._start_input(EditTarget.TYPE_NAME, entry.name)
                self.status = "Editing type name"
        elif sel.focus is Focus.FIELD_LIST:
            current = self.current_field()
            if current is not None:
                self._start_input(EditTarget.FIELD_VALUE, current.value)
                self.status = "Editing field value"

    def _start_input(self, target: EditTarget, initial: str) -> None:
        self.editing_target = target
        self.input_buffer = initial
        self.selection.focus = Focus.EDITING

    def _stop_editing(self) -> None:
        if self.editing_target is EditTarget.TYPE_NAME:
            self.selection.focus = Focus.TYPE_LIST
        elif self.editing_target is not None:
            self.selection.focus = Focus.FIELD_LIST
        self.editing_target = None
        self.pending_add = None
        self.input_buffer = ""

    def _apply_input(self) -> bool:
        """Commit the input buffer; True keeps the editing session open."""
        if self.pending_add is not None:
            return self._apply_pending_add()

        value = self.input_buffer
        sel = self.selection
        if self.editing_target is EditTarget.TYPE_NAME:
            if self.current_type() is not None:
                self.history.record("Rename type")
                self.document.rename_type(sel.selected_type, value)
                self.status = "Type renamed"
            return False

        if self.editing_target is EditTarget.FIELD_NAME:
            if self.current_field() is None:
                return False
            self.history.record("Rename field")
            self.document.set_field_key_name(sel.selected_type, sel.selected_field, value)
            # Chain straight into editing the value
            self.input_buffer = self.current_field().value
            self.editing_target = EditTarget.FIELD_VALUE
            self.status = "Field renamed; edit value"
            return True

        if self.editing_target is EditTarget.FIELD_VALUE:
            if self.current_field() is not None:
                self.history.record("Edit value")
                self.document.set_field_value(sel.selected_type, sel.selected_field, value)
                self.status = "Value updated"
        return False

    def _apply_pending_add(self) -> bool:
        pending = self.pending_add
        value = self.input_buffer
        if self.editing_target is EditTarget.FIELD_NAME:
            pending.name = value
            self.input_buffer = ""
            self.editing_target = EditTarget.FIELD_VALUE
            self.status = f"Enter a value for the new {pending.label}"
            return True

        if self.editing_target is not EditTarget.FIELD_VALUE:
            return False
        indices = self.selection.target_types(len(self.types))
        if not indices:
            self.status = "No types selected"
            return False

        self.history.record(f"Add {pending.label}")
        for idx in indices:
            entry = self.types[idx]
            self.document.append_field(idx, pending.build_field(entry, value))
            if idx == self.selection.selected_type:
                self.selection.selected_field = len(entry.fields) - 1
        self.status = f"Added {pending.label} to {len(indices)} types"
        logger.debug("Batch add of %s %r to types %s", pending.label, pending.name, indices)
        self.pending_add = None
        return False

    # ── Commands ────────────────────────────────────────────────

    def add(self) -> None:
        sel = self.selection
        if sel.focus is Focus.TYPE_LIST:
            if sel.multi_select:
                self.status = "Multi-select: add fields from the field list"
                return
            self.history.record("Add type")
            self.document.insert_type(TypeEntry(NEW_TYPE_NAME, default_fields()))
            sel.selected_type = len(self.types) - 1
            sel.selected_field = 0
            self._start_input(EditTarget.TYPE_NAME, NEW_TYPE_NAME)
            self.status = "Enter a name for the new type"
        elif sel.focus is Focus.FIELD_LIST:
            if sel.multi_select:
                self._begin_pending_add(PendingAdd(), NEW_FIELD_NAME)
                return
            entry = self.current_type()
            if entry is None:
                return
            self.history.record("Add field")
            index = entry.element_count(NEW_FIELD_NAME)
            self.document.append_field(sel.selected_type, Field(ElementKey(NEW_FIELD_NAME, index)))
            sel.selected_field = len(entry.fields) - 1
            self._start_input(EditTarget.FIELD_NAME, NEW_FIELD_NAME)
            self.status = "Added new field; enter a name"

    def add_attribute(self) -> None:
        sel = self.selection
        if sel.focus is not Focus.FIELD_LIST:
            if sel.multi_select:
                self.status = "Multi-select: add attributes from the field list"
            return
        base = self.current_field()
        if base is None:
            return
        if sel.multi_select:
            self._begin_pending_add(PendingAdd(attribute_of=base.key.group_key), NEW_ATTR_NAME)
            return
        self.history.record("Add attribute")
        element, index = base.key.group_key
        self.document.append_field(
            sel.selected_type, Field(AttributeKey(element, index, NEW_ATTR_NAME))
        )
        sel.selected_field = len(self.current_fields()) - 1
        self._start_input(EditTarget.FIELD_NAME, NEW_ATTR_NAME)
        self.status = "Added new attribute; enter a name"

    def _begin_pending_add(self, pending: PendingAdd, placeholder: str) -> None:
        if not self.types:
            return
        if not self.selection.target_types(len(self.types)):
            self.status = "No types selected"
            return
        self.pending_add = pending
        self._start_input(EditTarget.FIELD_NAME, placeholder)
        self.status = f"Enter a name for the new {pending.label}"

    def copy(self) -> None:
        sel = self.selection
        if sel.focus is Focus.TYPE_LIST:
            entry = self.current_type()
            if entry is None:
                return
            self.history.record("Copy type")
            clone = entry.clone()
            clone.name = f"{clone.name}_copy"
            self.document.insert_type(clone)
            sel.selected_type = len(self.types) - 1
            sel.selected_field = 0
            self.status = "Type copied"
        elif sel.focus is Focus.FIELD_LIST:
            current = self.current_field()
            if current is None:
                return
            self.history.record("Copy field")
            self.document.append_field(sel.selected_type, current.copy())
            sel.selected_field = len(self.current_fields()) - 1
            self.status = "Field copied"

    def delete(self) -> None:
        sel = self.selection
        if sel.focus is Focus.TYPE_LIST:
            if not self.types:
                return
            self.history.record("Delete type")
            self.document.remove_type(sel.selected_type)
            sel.selected_type = clamp_after_removal(sel.selected_type, len(self.types))
            sel.selected_field = 0
            self.status = "Type deleted"
        elif sel.focus is Focus.FIELD_LIST:
            if self.current_field() is None:
                return
            self.history.record("Delete field")
            self.document.remove_field(sel.selected_type, sel.selected_field)
            sel.selected_field = clamp_after_removal(
                sel.selected_field, len(self.current_fields())
            )
            self.status = "Field deleted"

    def delete_multi(self) -> None:
        if self.selection.focus is Focus.TYPE_LIST:
            self._delete_selected_types()
        elif self.selection.focus is Focus.FIELD_LIST:
            self._delete_field_multi()

    def _delete_selected_types(self) -> None:
        sel = self.selection
        indices = sel.target_types(len(self.types))
        if not indices:
            return
        self.history.record("Delete types")
        # Highest first so the remaining indices stay valid
        for idx in reversed(indices):
            self.document.remove_type(idx)
        sel.selected_type = clamp_after_removal(sel.selected_type, len(self.types))
        sel.selected_field = 0
        sel.clear_multi()
        self.status = f"Deleted {len(indices)} types"
        logger.debug("Batch delete of types %s", indices)

    def _delete_field_multi(self) -> None:
        sel = self.selection
        current = self.current_field()
        if current is None:
            return
        template = current.key
        indices = sel.target_types(len(self.types))
        if not indices:
            return
        self.history.record("Delete field from types")
        updated = 0
        for idx in indices:
            pos = self.types[idx].find_field(template)
            if pos is None:
                continue
            self.document.remove_field(idx, pos)
            updated += 1
        sel.selected_field = clamp_after_removal(sel.selected_field, len(self.current_fields()))
        self.status = f"Deleted field from {updated} types"
        logger.debug("Batch delete of %s from %d types", template, updated)

    # ── Undo / redo ─────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        sel = self.selection
        return Snapshot(
            document=self.document.clone(),
            selected_type=sel.selected_type,
            selected_field=sel.selected_field,
            multi_select=sel.multi_select,
            selected_types=frozenset(sel.selected_types),
            focus=Focus.FIELD_LIST if sel.focus is Focus.EDITING else sel.focus,
        )

    def restore(self, snapshot: Snapshot) -> None:
        sel = self.selection
        self.document = snapshot.document.clone()
        sel.selected_type = snapshot.selected_type
        sel.selected_field = snapshot.selected_field
        sel.multi_select = snapshot.multi_select
        sel.selected_types = set(snapshot.selected_types)
        sel.focus = snapshot.focus
        self.editing_target = None
        self.pending_add = None
        self.input_buffer = ""

    def undo(self) -> None:
        description = self.history.undo_text()
        if self.history.undo():
            self.status = f"Undid {description}"
        else:
            self.status = "Nothing to undo"

    def redo(self) -> None:
        description = self.history.redo_text()
        if self.history.redo():
            self.status = f"Redid {description}"
        else:
            self.status = "Nothing to redo"

    # ── Saving ──────────────────────────────────────────────────

    def save(self) -> None:
        if self.path is None:
            self.status = "No file loaded"
            return
        try:
            write_types(self.document, self.source, self.path, backup=True)
        except TypesEditorError as err:
            self.status = f"Save failed: {err}"
            logger.error("Saving %s failed: %s", self.path, err)
            return
        prefix = "Saved remote" if self.source.label == "ssh" else "Saved"
        self.status = f"{prefix} {self.path}"
