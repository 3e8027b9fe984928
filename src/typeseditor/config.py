"""Application settings management.

Loads key bindings from ``~/.typeseditor/settings.json``, falling back to
the bundled ``default_keys.json``.  Each action name maps to a list of key
names: textual key names for special keys (``up``, ``enter``, ``escape``)
and the character itself for printable keys.
"""

from __future__ import annotations

import importlib.resources
import json
from pathlib import Path

USER_CONFIG_DIR = Path.home() / ".typeseditor"
_USER_SETTINGS_PATH = USER_CONFIG_DIR / "settings.json"

_loaded: bool = False
_keymap: dict[str, list[str]] = {}
_key_index: dict[str, str] = {}  # key -> action name


# Human-readable labels for actions (used in the help overlay)
ACTION_LABELS: dict[str, str] = {
    "up": "Move up",
    "down": "Move down",
    "left": "Focus type list",
    "right": "Focus field list",
    "pg_up": "Page up",
    "pg_down": "Page down",
    "activate": "Edit / open / apply",
    "cancel": "Cancel edit or clear multi-select",
    "add": "Add type or field",
    "add_attribute": "Add attribute to current element",
    "copy": "Copy type or field",
    "delete": "Delete",
    "save": "Save (writes .bak first)",
    "undo": "Undo",
    "redo": "Redo",
    "toggle_select": "Toggle type in multi-select",
    "toggle_remote": "Toggle SSH / local (file picker)",
    "tab": "Next form field",
    "help": "Toggle help",
    "quit": "Quit",
}


def _load_defaults() -> dict[str, list[str]]:
    """Load the bundled default key map using importlib.resources.

    Works whether the package is run from source or installed as a wheel.
    """
    try:
        ref = importlib.resources.files("typeseditor").joinpath("default_keys.json")
        with importlib.resources.as_file(ref) as p:
            with open(p, encoding="utf-8") as f:
                return json.load(f)
    except (FileNotFoundError, TypeError):
        return {}


def _load_settings() -> dict:
    """Load the user settings file, if any."""
    if _USER_SETTINGS_PATH.exists():
        with open(_USER_SETTINGS_PATH, encoding="utf-8") as f:
            return json.load(f)
    return {}


def _load() -> None:
    """Load and merge default + user configs."""
    global _keymap, _key_index, _loaded
    _keymap = {action: list(keys) for action, keys in _load_defaults().items()}
    user = _load_settings()
    if "keys" in user:
        for action, keys in user["keys"].items():
            _keymap[action] = [keys] if isinstance(keys, str) else list(keys)

    _key_index = {}
    for action, keys in _keymap.items():
        for key in keys:
            _key_index.setdefault(key, action)
    _loaded = True


def get_keymap() -> dict[str, list[str]]:
    """Return the full action -> keys mapping (cached after first call)."""
    if not _loaded:
        _load()
    return _keymap


def get_keys(action: str) -> list[str]:
    """Return the keys bound to *action*, or an empty list."""
    return get_keymap().get(action, [])


def action_for_key(key: str) -> str | None:
    """Return the action name bound to *key*, if any."""
    if not _loaded:
        _load()
    return _key_index.get(key)


def reload() -> None:
    """Force re-read of config files."""
    _load()
