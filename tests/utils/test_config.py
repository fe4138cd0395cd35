"""
Unit Tests for Configuration Utilities

Run: pytest tests/utils/test_config.py -v
"""

import yaml

from f1_flags.utils.config import DEFAULT_CONFIG, load_config, merge_config, save_config


class TestMergeConfig:

    def test_nested_override(self):
        merged = merge_config(DEFAULT_CONFIG, {"telemetry": {"port": 20777}})
        assert merged["telemetry"]["port"] == 20777
        assert merged["telemetry"]["host"] == "127.0.0.1"

    def test_defaults_not_mutated(self):
        merge_config(DEFAULT_CONFIG, {"flags": {"penalty_show_seconds": 5.0}})
        assert DEFAULT_CONFIG["flags"]["penalty_show_seconds"] == 2.0

    def test_empty_section_keeps_defaults(self):
        merged = merge_config(DEFAULT_CONFIG, {"output": None, "flags": {"penalty_show_seconds": 3.0}})
        assert merged["output"] == {"destination": None}
        assert merged["flags"]["penalty_show_seconds"] == 3.0

    def test_none_leaf_value_still_replaces(self):
        merged = merge_config(DEFAULT_CONFIG, {"output": {"destination": None}})
        assert merged["output"]["destination"] is None

    def test_new_keys_added(self):
        merged = merge_config({"a": {"b": 1}}, {"a": {"c": 2}, "d": 3})
        assert merged == {"a": {"b": 1, "c": 2}, "d": 3}


class TestLoadConfig:

    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"))
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_partial_file_merged_over_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("output:\n  destination: 10.0.0.5:20999\n")
        config = load_config(str(path))
        assert config["output"]["destination"] == "10.0.0.5:20999"
        assert config["telemetry"]["port"] == 20888

    def test_commented_out_section_keeps_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("output:\n  # destination: 10.0.0.2:20999\n")
        config = load_config(str(path))
        assert config["output"] == {"destination": None}
        config["output"]["destination"] = "10.0.0.2:20999"

    def test_invalid_yaml_returns_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("telemetry: [unclosed\n")
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_non_mapping_returns_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- just\n- a list\n")
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_empty_file_returns_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_bundled_settings_load(self):
        config = load_config()
        assert config["telemetry"]["port"] == 20888
        assert config["flags"]["penalty_show_seconds"] == 2.0


class TestSaveConfig:

    def test_save_creates_directories(self, tmp_path):
        path = tmp_path / "nested" / "settings.yaml"
        save_config({"flags": {"penalty_show_seconds": 3.0}}, str(path))
        assert yaml.safe_load(path.read_text()) == {"flags": {"penalty_show_seconds": 3.0}}

    def test_save_then_load(self, tmp_path):
        path = str(tmp_path / "settings.yaml")
        config = merge_config(DEFAULT_CONFIG, {"logging": {"level": "DEBUG"}})
        save_config(config, path)
        assert load_config(path) == config
