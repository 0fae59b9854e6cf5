"""Unit tests for services/config_service.py.

Uses a real ConfigService pointed at a tmp_path directory.
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from pomoplan.models.config_models import AppConfig
from pomoplan.models.exceptions import ConfigurationError
from pomoplan.services.config_service import ConfigService, get_config_service


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------


class TestInit:
    def test_first_run_writes_defaults(self, tmp_config):
        config = tmp_config.config
        assert config == AppConfig()
        assert tmp_config.config_path.exists()
        saved = json.loads(tmp_config.config_path.read_text(encoding="utf-8"))
        assert saved["focus_duration"] == 25

    def test_directories_created(self, tmp_path):
        ConfigService(config_dir=tmp_path / "cfg", data_dir=tmp_path / "data")
        assert (tmp_path / "cfg").is_dir()
        assert (tmp_path / "data").is_dir()

    def test_tasks_path_lives_in_data_dir(self, tmp_path):
        svc = ConfigService(config_dir=tmp_path / "cfg", data_dir=tmp_path / "data")
        assert svc.tasks_path == tmp_path / "data" / "tasks.json"

    def test_existing_file_is_loaded(self, tmp_path):
        (tmp_path / "config.json").write_text(
            json.dumps({"focus_duration": 45, "auto_start_next_session": True}),
            encoding="utf-8",
        )
        svc = ConfigService(config_dir=tmp_path, data_dir=tmp_path)
        assert svc.config.focus_duration == 45
        assert svc.config.auto_start_next_session is True
        assert svc.config.break_duration == 5

    def test_broken_file_raises(self, tmp_path):
        (tmp_path / "config.json").write_text("{oops", encoding="utf-8")
        svc = ConfigService(config_dir=tmp_path, data_dir=tmp_path)
        with pytest.raises(RuntimeError, match="Failed to load config"):
            svc.load_config()


# ---------------------------------------------------------------------------
# get / set
# ---------------------------------------------------------------------------


class TestGetSet:
    def test_get_top_level_and_nested(self, tmp_config):
        assert tmp_config.get("focus_duration") == 25
        assert tmp_config.get("notifications.reminders") is True

    def test_get_unknown_key(self, tmp_config):
        with pytest.raises(ConfigurationError):
            tmp_config.get("nope.nothing")

    def test_set_persists(self, tmp_config):
        tmp_config.set("notifications.reminders", False)
        tmp_config.set("break_duration", "10")

        reloaded = ConfigService(
            config_dir=tmp_config.config_dir, data_dir=tmp_config.data_dir
        )
        assert reloaded.config.notifications.reminders is False
        assert reloaded.config.break_duration == 10

    @pytest.mark.parametrize(
        "key,value",
        [("focus_duration", 0), ("focus_duration", "soon"), ("unknown", 1), ("focus_duration.x", 1)],
    )
    def test_set_rejects_bad_input(self, tmp_config, key, value):
        with pytest.raises(ConfigurationError):
            tmp_config.set(key, value)
        assert tmp_config.config.focus_duration == 25

    def test_reset(self, tmp_config):
        tmp_config.set("focus_duration", 50)
        assert tmp_config.reset_config().focus_duration == 25


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


class TestPresets:
    def test_apply_preset(self, tmp_config):
        preset = tmp_config.apply_preset("long")
        assert preset.name == "Long"
        assert tmp_config.config.focus_duration == 50
        assert tmp_config.config.break_duration == 10

    def test_unknown_preset(self, tmp_config):
        with pytest.raises(ConfigurationError):
            tmp_config.apply_preset("marathon")


def test_get_config_service_is_cached(tmp_path):
    get_config_service.cache_clear()
    with patch("pomoplan.services.config_service.user_config_dir", return_value=str(tmp_path)):
        with patch("pomoplan.services.config_service.user_data_dir", return_value=str(tmp_path)):
            assert get_config_service() is get_config_service()
    get_config_service.cache_clear()
