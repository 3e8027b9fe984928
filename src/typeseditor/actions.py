"""Action vocabulary exchanged between the terminal front-end and the core.

The file picker and editor consume these values; only the front-end ever
sees raw key events.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Action(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    PG_UP = "pg_up"
    PG_DOWN = "pg_down"
    ACTIVATE = "activate"
    CANCEL = "cancel"
    ADD = "add"
    ADD_ATTRIBUTE = "add_attribute"
    COPY = "copy"
    DELETE = "delete"
    SAVE = "save"
    UNDO = "undo"
    REDO = "redo"
    TOGGLE_SELECT = "toggle_select"
    TOGGLE_REMOTE = "toggle_remote"
    TAB = "tab"
    BACKSPACE = "backspace"
    QUIT = "quit"
    HELP = "help"
    NONE = "none"


@dataclass(frozen=True)
class Input:
    """A typed character."""

    char: str


AnyAction = Union[Action, Input]
