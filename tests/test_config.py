"""Tests for key binding configuration."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from typeseditor import config
from typeseditor.actions import Action


@pytest.fixture
def settings_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user settings at a temporary file and reload around the test."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr(config, "USER_CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config, "_USER_SETTINGS_PATH", path)
    config.reload()
    yield path
    monkeypatch.undo()
    config.reload()


class TestConfig:
    def test_defaults_loaded(self, settings_path: Path):
        keymap = config.get_keymap()
        assert isinstance(keymap, dict)
        assert keymap["quit"] == ["q"]

    def test_every_default_names_an_action(self, settings_path: Path):
        for name in config.get_keymap():
            Action(name)

    def test_default_bindings(self, settings_path: Path):
        assert config.action_for_key("j") == "down"
        assert config.action_for_key("down") == "down"
        assert config.action_for_key("U") == "redo"
        assert config.action_for_key("u") == "undo"
        assert config.action_for_key("space") == "toggle_select"

    def test_unknown_key(self, settings_path: Path):
        assert config.action_for_key("f12") is None
        assert config.get_keys("__nonexistent__") == []

    def test_user_override(self, settings_path: Path):
        settings_path.write_text(json.dumps({"keys": {"save": "w"}}), encoding="utf-8")
        config.reload()
        assert config.get_keys("save") == ["w"]
        assert config.action_for_key("w") == "save"
        assert config.action_for_key("s") is None

    def test_action_labels_exist(self):
        assert isinstance(config.ACTION_LABELS, dict)
        assert "add_attribute" in config.ACTION_LABELS
        assert "toggle_select" in config.ACTION_LABELS
