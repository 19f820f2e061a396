"""
Settings from config.json with defaults.
"""

import json

from TextCalc import config_manager


def test_missing_file_uses_defaults(tmp_path):
    settings = config_manager.load_setting_value("all", tmp_path / "missing.json")
    assert settings == config_manager.DEFAULT_SETTINGS


def test_file_values_override_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"decimal_places": 2}), encoding="utf-8")
    assert config_manager.load_setting_value("decimal_places", path) == 2
    assert config_manager.load_setting_value("max_denominator", path) == 10000


def test_broken_file_uses_defaults(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert config_manager.load_setting_value("all", path) == config_manager.DEFAULT_SETTINGS
    assert "broken config file" in caplog.text


def test_merge_settings_overrides():
    settings = config_manager.merge_settings({"suggest_finite_base": False})
    assert settings["suggest_finite_base"] is False
    assert settings["decimal_places"] == 6
