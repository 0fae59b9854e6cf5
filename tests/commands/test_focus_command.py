"""Tests for the 'focus' command group.

The live session loop is replaced by a stand-in that simulates Ctrl+C, so
the command runs its real start and pause path without waiting on the clock.
"""

from __future__ import annotations

from unittest.mock import patch

from typer.testing import CliRunner

from pomoplan.commands.focus import app
from pomoplan.utils import exit_codes

runner = CliRunner()


async def interrupt_immediately(timer, display, reminders, interrupted):
    interrupted.set()


async def finish_immediately(timer, display, reminders, interrupted):
    return None


class TestStart:
    def test_interrupt_pauses_and_saves(self, cli_service, repo):
        task = cli_service.add_task("Read", estimated_minutes=50)
        with patch("pomoplan.commands.focus.run_session", new=interrupt_immediately):
            result = runner.invoke(app, ["start", task.id[:8]])

        assert result.exit_code == 0, result.output
        assert "Paused 'Read'" in result.output
        assert task.status == "partial"
        assert repo.load_tasks()[0].status == "partial"

    def test_session_end_without_interrupt(self, cli_service):
        task = cli_service.add_task("Read", estimated_minutes=50)
        with patch("pomoplan.commands.focus.run_session", new=finish_immediately):
            result = runner.invoke(app, ["start", task.id[:8], "--no-auto"])

        assert result.exit_code == 0, result.output
        assert "Interval done" in result.output

    def test_completed_task_has_nothing_to_run(self, cli_service):
        task = cli_service.add_task("Read", estimated_minutes=25)
        cli_service.lifecycle.complete_current_interval(task)

        result = runner.invoke(app, ["start", task.id[:8]])

        assert result.exit_code == 0, result.output
        assert "Nothing left to run" in result.output

    def test_unknown_task(self, cli_service):
        result = runner.invoke(app, ["start", "deadbeef"])
        assert result.exit_code == exit_codes.ERROR_NOT_FOUND


class TestEndStatus:
    def test_end_completes_early(self, cli_service):
        task = cli_service.add_task("Read", estimated_minutes=75)
        cli_service.lifecycle.complete_current_interval(task)

        result = runner.invoke(app, ["end", task.id[:8]])

        assert result.exit_code == 0, result.output
        assert "Ended 'Read' early" in result.output
        assert task.status == "completed"
        assert task.ended_early is True
        assert task.progress.completed_sessions == 1

    def test_status_lists_active_tasks(self, cli_service):
        task = cli_service.add_task("Read")
        cli_service.lifecycle.start(task)
        cli_service.lifecycle.pause(task)

        result = runner.invoke(app, ["status"])
        assert "Read" in result.output
        assert "partial" in result.output

    def test_status_without_active_tasks(self, cli_service):
        result = runner.invoke(app, ["status"])
        assert "No task in progress" in result.output
