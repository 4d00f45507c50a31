"""Tests for memostack.lib.config module."""

import pytest
import yaml
from pathlib import Path
from unittest.mock import patch

from memostack.lib.config import (
    AppConfig,
    config_from_dict,
    get_data_dir,
    get_database_path,
    load_config,
)


class TestLoadConfig:
    """Test config.yaml loading and fallback."""

    def test_missing_file_writes_defaults(self, tmp_path):
        config = load_config(tmp_path)
        assert config == AppConfig()
        assert config.max_hot_count == 7
        assert config.cold_spotlight_interval_seconds == 60

        written = yaml.safe_load((tmp_path / "config.yaml").read_text())
        assert written["max_hot_count"] == 7

    def test_reads_values(self, tmp_path):
        (tmp_path / "config.yaml").write_text("max_hot_count: 3\ncold_spotlight_interval_seconds: 0\n")
        config = load_config(tmp_path)
        assert config.max_hot_count == 3
        assert config.cold_spotlight_interval_seconds == 0

    def test_malformed_yaml_falls_back_without_overwriting(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("max_hot_count: [unclosed\n")
        config = load_config(tmp_path)

        assert config == AppConfig()
        assert path.read_text() == "max_hot_count: [unclosed\n"
        assert "Failed to read" in caplog.text

    def test_empty_file_uses_defaults(self, tmp_path):
        (tmp_path / "config.yaml").write_text("")
        assert load_config(tmp_path) == AppConfig()

    def test_wrong_type_uses_defaults(self, tmp_path, caplog):
        (tmp_path / "config.yaml").write_text("max_hot_count: lots\n")
        assert load_config(tmp_path) == AppConfig()
        assert "[CONFIG]" in caplog.text

    def test_non_mapping_uses_defaults(self, tmp_path):
        (tmp_path / "config.yaml").write_text("- 1\n- 2\n")
        assert load_config(tmp_path) == AppConfig()


class TestConfigFromDict:
    """Test per-field validation."""

    def test_invalid_capacity_defaults_with_warning(self, caplog):
        config = config_from_dict({"max_hot_count": 0})
        assert config.max_hot_count == 7
        assert "Invalid max_hot_count 0, using 7" in caplog.text

    def test_negative_interval_defaults(self, caplog):
        config = config_from_dict({"cold_spotlight_interval_seconds": -1})
        assert config.cold_spotlight_interval_seconds == 60

    def test_bool_is_not_an_int(self):
        assert config_from_dict({"max_hot_count": True}).max_hot_count == 7

    def test_pause_spotlight_flag(self, caplog):
        assert config_from_dict({}).pause_spotlight_when_expanded is True
        assert config_from_dict({"pause_spotlight_when_expanded": False}).pause_spotlight_when_expanded is False
        assert config_from_dict({"pause_spotlight_when_expanded": "no"}).pause_spotlight_when_expanded is True
        assert "Invalid pause_spotlight_when_expanded" in caplog.text

    def test_unknown_keys_ignored(self):
        assert config_from_dict({"theme": "dark"}) == AppConfig()


class TestDataDir:
    """Test data directory resolution."""

    def test_explicit_wins(self, tmp_path):
        with patch.dict("os.environ", {"MEMOSTACK_DATA_DIR": "/elsewhere"}):
            assert get_data_dir(str(tmp_path)) == tmp_path

    def test_env_var(self):
        with patch.dict("os.environ", {"MEMOSTACK_DATA_DIR": "/data/memos"}):
            assert get_data_dir() == Path("/data/memos")

    def test_xdg_data_home(self):
        with patch.dict("os.environ", {"XDG_DATA_HOME": "/xdg"}, clear=True):
            assert get_data_dir() == Path("/xdg/memo-stack")

    def test_home_fallback(self, tmp_path):
        with patch.dict("os.environ", {}, clear=True), \
                patch("memostack.lib.config.Path.home", return_value=tmp_path):
            assert get_data_dir() == tmp_path / ".local" / "share" / "memo-stack"

    def test_database_path(self, tmp_path):
        assert get_database_path(tmp_path) == tmp_path / "memos.db"
