"""Unit tests for pomoplan.utils.exit_codes."""

from __future__ import annotations

import pytest

from pomoplan.utils.exit_codes import (
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_NOT_FOUND,
    ERROR_PERSISTENCE,
    SUCCESS,
    get_exit_code_description,
    get_exit_code_name,
)


class TestExitCodeConstants:
    def test_values(self):
        assert (SUCCESS, ERROR_GENERAL, ERROR_INVALID_ARGS) == (0, 1, 2)
        assert ERROR_NOT_FOUND == 5
        assert ERROR_PERSISTENCE == 7

    def test_codes_are_unique(self):
        codes = [SUCCESS, ERROR_GENERAL, ERROR_INVALID_ARGS, ERROR_NOT_FOUND, ERROR_PERSISTENCE]
        assert len(set(codes)) == len(codes)


class TestHelpers:
    @pytest.mark.parametrize(
        "code,name",
        [
            (SUCCESS, "SUCCESS"),
            (ERROR_NOT_FOUND, "ERROR_NOT_FOUND"),
            (ERROR_PERSISTENCE, "ERROR_PERSISTENCE"),
        ],
    )
    def test_name(self, code, name):
        assert get_exit_code_name(code) == name

    def test_unknown_name(self):
        assert get_exit_code_name(99) == "UNKNOWN(99)"

    def test_description(self):
        assert get_exit_code_description(ERROR_NOT_FOUND) == "Task not found"
        assert get_exit_code_description(99) == "Unknown error"
