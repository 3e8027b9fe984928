"""Focus and selection state for the two-pane editor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class Focus(Enum):
    TYPE_LIST = auto()
    FIELD_LIST = auto()
    EDITING = auto()


class EditTarget(Enum):
    TYPE_NAME = auto()
    FIELD_NAME = auto()
    FIELD_VALUE = auto()


def step_index(current: int, delta: int, length: int) -> int:
    """Move *current* by *delta* inside ``range(length)``.

    Single steps wrap: forward off the last item lands on 0, back off
    item 0 lands on the last one.  Page moves (``|delta| > 1``) clamp to
    the nearest end instead.
    """
    target = current + delta
    if abs(delta) == 1:
        return target % length
    return max(0, min(length - 1, target))


def clamp_after_removal(index: int, length: int) -> int:
    """Keep a selection valid after the list shrank to *length*."""
    if length == 0:
        return 0
    return min(index, length - 1)


@dataclass
class Selection:
    """Current type, current field, pane focus and the multi-select set.

    ``multi_select`` is on exactly when ``selected_types`` is non-empty.
    """

    selected_type: int = 0
    selected_field: int = 0
    focus: Focus = Focus.TYPE_LIST
    multi_select: bool = False
    selected_types: set[int] = field(default_factory=set)

    def reset(self) -> None:
        self.selected_type = 0
        self.selected_field = 0
        self.focus = Focus.TYPE_LIST
        self.clear_multi()

    # ── Multi-select ────────────────────────────────────────────

    def toggle_type(self, index: int) -> None:
        self.multi_select = True
        if index in self.selected_types:
            self.selected_types.discard(index)
        else:
            self.selected_types.add(index)
        if not self.selected_types:
            self.multi_select = False

    def clear_multi(self) -> None:
        self.multi_select = False
        self.selected_types.clear()

    def target_types(self, type_count: int) -> list[int]:
        """Indices a batch command applies to, in ascending order."""
        if self.multi_select:
            return sorted(i for i in self.selected_types if i < type_count)
        if type_count == 0:
            return []
        return [self.selected_type]
