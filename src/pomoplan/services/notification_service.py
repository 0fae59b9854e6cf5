"""Outbound notification and view-refresh collaborators.

The engine reports lifecycle moments to a ``NotificationSink`` and asks
``ViewHooks`` to redraw after mutations. Both are fire-and-forget: the
engine never waits on them, and a failing sink is logged rather than
allowed to disturb timer or task state.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console

from pomoplan.models import NotificationConfig, Task

logger = logging.getLogger(__name__)


class NotificationSink:
    """Receives lifecycle notifications. The base class ignores them all."""

    def on_focus_start(self, task: Task, session_number: int) -> None:
        pass

    def on_focus_end(self, task: Task, session_number: int) -> None:
        pass

    def on_break_start(self, task: Task) -> None:
        pass

    def on_break_end(self, task: Task) -> None:
        pass

    def on_task_completed(self, task: Task) -> None:
        pass

    def on_task_missed(self, task: Task) -> None:
        pass

    def on_priority_conflict(self, task: Task) -> None:
        pass

    def on_task_reminder(self, task: Task, minutes_until_start: int) -> None:
        pass


class ViewHooks:
    """Redraw requests issued after visible state changes."""

    def refresh_task_list(self) -> None:
        pass

    def refresh_calendar(self) -> None:
        pass


def notify(target: NotificationSink | ViewHooks, event: str, *args: Any) -> None:
    """Invoke ``target.<event>(*args)``, logging and dropping any failure."""
    try:
        getattr(target, event)(*args)
    except Exception:
        logger.exception("%s.%s failed", type(target).__name__, event)


class LoggingNotificationSink(NotificationSink):
    """Writes every notification to the application log."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def on_focus_start(self, task: Task, session_number: int) -> None:
        self.log.info("Focus session %d started: %s", session_number, task.name)

    def on_focus_end(self, task: Task, session_number: int) -> None:
        self.log.info("Focus session %d finished: %s", session_number, task.name)

    def on_break_start(self, task: Task) -> None:
        self.log.info("Break started: %s", task.name)

    def on_break_end(self, task: Task) -> None:
        self.log.info("Break finished: %s", task.name)

    def on_task_completed(self, task: Task) -> None:
        self.log.info("Task completed: %s", task.name)

    def on_task_missed(self, task: Task) -> None:
        self.log.info("Task missed: %s", task.name)

    def on_priority_conflict(self, task: Task) -> None:
        self.log.info("Higher priority task waiting: %s", task.name)

    def on_task_reminder(self, task: Task, minutes_until_start: int) -> None:
        self.log.info("Reminder: %s starts in %d minutes", task.name, minutes_until_start)


class ConsoleNotificationSink(NotificationSink):
    """Prints notifications with Rich, honouring the notification settings."""

    def __init__(self, console: Console, config: NotificationConfig | None = None):
        self.console = console
        self.config = config or NotificationConfig()

    def _show(self, flag: bool, message: str) -> None:
        if self.config.enabled and flag:
            self.console.print(message)

    def on_focus_start(self, task: Task, session_number: int) -> None:
        self._show(
            self.config.task_start,
            f"[cyan]🍅 Focus session {session_number} started:[/cyan] {task.name}",
        )

    def on_focus_end(self, task: Task, session_number: int) -> None:
        self._show(
            self.config.session_end,
            f"[green]✓ Focus session {session_number} done.[/green] Time for a break!",
        )

    def on_break_start(self, task: Task) -> None:
        self._show(self.config.task_start, f"[blue]☕ Break started:[/blue] {task.name}")

    def on_break_end(self, task: Task) -> None:
        self._show(self.config.break_end, "[blue]Break over.[/blue] Back to work!")

    def on_task_completed(self, task: Task) -> None:
        self._show(self.config.task_complete, f"[bold green]🎉 Completed:[/bold green] {task.name}")

    def on_task_missed(self, task: Task) -> None:
        self._show(self.config.task_start, f"[red]Missed:[/red] {task.name}")

    def on_priority_conflict(self, task: Task) -> None:
        self._show(
            True,
            f"[yellow]⚠ Higher priority task waiting:[/yellow] {task.name} "
            f"([bold]{task.priority}[/bold])",
        )

    def on_task_reminder(self, task: Task, minutes_until_start: int) -> None:
        self._show(
            self.config.reminders,
            f"[magenta]⏰ {task.name}[/magenta] starts in {minutes_until_start} minutes",
        )
