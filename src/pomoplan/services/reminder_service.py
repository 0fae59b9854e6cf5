"""Reminder service - announces tasks shortly before they start."""

from __future__ import annotations

import logging
import math
from datetime import datetime

from pomoplan.models import Task
from pomoplan.services.notification_service import NotificationSink, notify
from pomoplan.services.task_service import TaskService

logger = logging.getLogger(__name__)


class ReminderService:
    """Fires ``on_task_reminder`` once per task inside its reminder window.

    A task is due a reminder when ``start - reminder_minutes <= now < start``.
    Which tasks were already reminded is kept in memory only, so a restart
    inside the window reminds again.
    """

    def __init__(self, task_service: TaskService, notifier: NotificationSink | None = None):
        self.task_service = task_service
        self.notifier = notifier or task_service.notifier
        self._reminded: set[str] = set()

    def due_reminders(self, now: datetime) -> list[Task]:
        due = []
        for task in self.task_service.list_tasks("pending"):
            if task.id in self._reminded or task.reminder_minutes <= 0:
                continue
            start = task.scheduled_start
            reminder_at = task.reminder_at
            if start is None or reminder_at is None:
                continue
            if reminder_at <= now < start:
                due.append(task)
        return due

    def check(self, now: datetime | None = None) -> list[Task]:
        """Send reminders that are due.

        Returns:
            The tasks reminded by this call
        """
        now = now or self.task_service.clock()
        due = self.due_reminders(now)
        for task in due:
            minutes = math.ceil((task.scheduled_start - now).total_seconds() / 60)
            logger.info("Reminding about %s (%d min)", task.id, minutes)
            notify(self.notifier, "on_task_reminder", task, minutes)
            self._reminded.add(task.id)
        return due

