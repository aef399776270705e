"""Tests for user settings."""
import json

import pytest

from tabmaker.constants import HISTORY_LIMIT, INITIAL_COLUMNS
from tabmaker.settings import Settings


def test_defaults_when_file_missing(tmp_path):
    settings = Settings.load(tmp_path / "settings.json")
    assert settings.undo_limit == HISTORY_LIMIT
    assert settings.initial_columns == INITIAL_COLUMNS
    assert settings.auto_save_enabled
    assert settings.fallback_name == "hunter_tab"
    assert settings.get("midi", "bpm") == 120


def test_file_values_merged_over_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"general": {"undo_limit": 5}, "custom": {"x": 1}}))
    settings = Settings.load(path)
    assert settings.undo_limit == 5
    # Untouched keys keep their defaults
    assert settings.initial_columns == INITIAL_COLUMNS
    assert settings.get("custom", "x") == 1


def test_corrupt_file_falls_back(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    settings = Settings.load(path)
    assert settings.undo_limit == HISTORY_LIMIT
    assert "Failed to load settings" in caplog.text


def test_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    settings = Settings(path)
    settings.set("general", "initial_columns", 16)
    settings.save()
    assert Settings.load(path).initial_columns == 16


def test_values_argument(tmp_path):
    settings = Settings(tmp_path / "s.json", values={"general": {"undo_limit": 3}})
    assert settings.undo_limit == 3


def test_defaults_not_shared_between_instances(tmp_path):
    a = Settings(tmp_path / "a.json")
    a.set("general", "undo_limit", 1)
    b = Settings(tmp_path / "b.json")
    assert b.undo_limit == HISTORY_LIMIT


@pytest.mark.parametrize("payload", ["[]", "3", "null"])
def test_non_object_file_ignored(tmp_path, payload):
    path = tmp_path / "settings.json"
    path.write_text(payload)
    assert Settings.load(path).undo_limit == HISTORY_LIMIT
