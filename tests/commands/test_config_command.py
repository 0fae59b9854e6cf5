"""Tests for the 'config' command group."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from pomoplan.commands.config import app
from pomoplan.utils import exit_codes

runner = CliRunner()


@pytest.fixture()
def config_svc(tmp_config):
    with patch("pomoplan.commands.config.get_config_service", return_value=tmp_config):
        yield tmp_config


def test_show(config_svc):
    result = runner.invoke(app, ["show"])
    assert result.exit_code == 0, result.output
    assert '"focus_duration": 25' in result.output


def test_get_nested(config_svc):
    result = runner.invoke(app, ["get", "notifications"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["reminders"] is True


def test_set_parses_json_values(config_svc):
    result = runner.invoke(app, ["set", "auto_start_next_session", "true"])
    assert result.exit_code == 0, result.output
    assert config_svc.config.auto_start_next_session is True


def test_set_invalid_value(config_svc):
    result = runner.invoke(app, ["set", "focus_duration", "0"])
    assert result.exit_code == exit_codes.ERROR_INVALID_ARGS
    assert config_svc.config.focus_duration == 25


def test_get_unknown_key(config_svc):
    result = runner.invoke(app, ["get", "colour"])
    assert result.exit_code == exit_codes.ERROR_INVALID_ARGS


def test_preset(config_svc):
    result = runner.invoke(app, ["preset", "Short"])
    assert result.exit_code == 0, result.output
    assert "15/3" in result.output
    assert config_svc.config.focus_duration == 15
