"""Snapshot-based undo/redo on top of QUndoStack.

Batch commands touch many types at once, so instead of per-operation
inverse logic every mutating command records a full snapshot of the
editor state before it runs.  :class:`SnapshotCommand` swaps snapshots on
undo and redo; QUndoStack supplies the two stacks and drops the redo side
when a new command is pushed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from PySide6.QtGui import QUndoCommand, QUndoStack

from typeseditor.models import TypesDocument
from typeseditor.selection import Focus


@dataclass(frozen=True)
class Snapshot:
    """Deep copy of the document plus selection state.

    ``focus`` is never EDITING: restoring must not land in a half-finished
    edit, so an editing focus is stored as FIELD_LIST.
    """

    document: TypesDocument
    selected_type: int
    selected_field: int
    multi_select: bool
    selected_types: frozenset[int]
    focus: Focus


class Snapshottable(Protocol):
    def snapshot(self) -> Snapshot: ...

    def restore(self, snapshot: Snapshot) -> None: ...


class SnapshotCommand(QUndoCommand):
    """Undo frame holding the state before (and, once undone, after) an edit.

    QUndoStack.push() calls redo() immediately; at that point the edit has
    not run yet, so the first redo() is a no-op and the caller performs the
    mutation right after pushing.  Later redo()/undo() calls capture the
    live state before restoring, so selection moves made in between are
    kept on the opposite stack.
    """

    def __init__(
        self,
        owner: Snapshottable,
        before: Snapshot,
        *,
        description: str = "Edit",
    ) -> None:
        super().__init__(description)
        self._owner = owner
        self._before = before
        self._after: Snapshot | None = None
        self._pushed = False

    def redo(self) -> None:
        if not self._pushed:
            self._pushed = True
            return
        assert self._after is not None
        self._before = self._owner.snapshot()
        self._owner.restore(self._after)

    def undo(self) -> None:
        self._after = self._owner.snapshot()
        self._owner.restore(self._before)


class History:
    """Undo/redo stacks for one editor."""

    def __init__(self, owner: Snapshottable) -> None:
        self._owner = owner
        self._stack = QUndoStack()

    def record(self, description: str = "Edit") -> None:
        """Push the current state; call before mutating."""
        self._stack.push(
            SnapshotCommand(self._owner, self._owner.snapshot(), description=description)
        )

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        self._stack.undo()
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        self._stack.redo()
        return True

    def clear(self) -> None:
        self._stack.clear()

    def can_undo(self) -> bool:
        return self._stack.canUndo()

    def can_redo(self) -> bool:
        return self._stack.canRedo()

    def undo_text(self) -> str:
        return self._stack.undoText()

    def redo_text(self) -> str:
        return self._stack.redoText()
