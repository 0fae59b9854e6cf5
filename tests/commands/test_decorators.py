"""Tests for command decorators."""

from __future__ import annotations

import pytest
import typer

from pomoplan.commands.decorators import command_wrapper, exit_code_for
from pomoplan.models.exceptions import (
    ConfigurationError,
    PersistenceError,
    PomoplanError,
    TaskNotFoundError,
)
from pomoplan.utils import exit_codes


class TestExitCodeFor:
    @pytest.mark.parametrize(
        "error,code",
        [
            (TaskNotFoundError("abc"), exit_codes.ERROR_NOT_FOUND),
            (ConfigurationError("bad"), exit_codes.ERROR_INVALID_ARGS),
            (ValueError("bad"), exit_codes.ERROR_INVALID_ARGS),
            (PersistenceError("disk"), exit_codes.ERROR_PERSISTENCE),
            (PomoplanError("other"), exit_codes.ERROR_GENERAL),
        ],
    )
    def test_mapping(self, error, code):
        assert exit_code_for(error) == code


class TestCommandWrapper:
    def test_returns_result(self):
        @command_wrapper
        def ok():
            return "done"

        assert ok() == "done"

    def test_runs_coroutines(self):
        @command_wrapper
        async def ok_async(value):
            return value * 2

        assert ok_async(21) == 42

    def test_domain_error_becomes_exit_code(self, capsys):
        @command_wrapper
        def missing():
            raise TaskNotFoundError("abc")

        with pytest.raises(typer.Exit) as exc_info:
            missing()

        assert exc_info.value.exit_code == exit_codes.ERROR_NOT_FOUND
        assert "Task 'abc' not found" in capsys.readouterr().out

    def test_unexpected_error(self, capsys):
        @command_wrapper
        def broken():
            raise KeyError("boom")

        with pytest.raises(typer.Exit) as exc_info:
            broken()

        assert exc_info.value.exit_code == exit_codes.ERROR_GENERAL
        assert "An unexpected error occurred" in capsys.readouterr().out

    def test_typer_exit_passes_through(self):
        @command_wrapper
        def leave():
            raise typer.Exit(code=3)

        with pytest.raises(typer.Exit) as exc_info:
            leave()
        assert exc_info.value.exit_code == 3

    def test_logs_to_file(self, tmp_path):
        @command_wrapper
        def ok():
            return None

        ok()
        content = (tmp_path / "logs" / "pomoplan.log").read_text(encoding="utf-8")
        assert "command started: ok" in content
