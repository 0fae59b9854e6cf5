"""Tests for ReminderService."""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from pomoplan.services.reminder_service import ReminderService


@pytest.fixture()
def reminders(service) -> ReminderService:
    return ReminderService(service)


def at(hour, minute=0) -> datetime:
    return datetime(2025, 3, 5, hour, minute)


class TestReminders:
    def test_fires_inside_window_once(self, service, reminders, notifier):
        task = service.add_task(
            "Call", start_date=date(2025, 3, 5), start_time=time(10, 0), reminder_minutes=30
        )

        assert reminders.check(at(9, 29)) == []
        assert reminders.check(at(9, 31)) == [task]
        notifier.on_task_reminder.assert_called_once_with(task, 29)

        assert reminders.check(at(9, 45)) == []
        notifier.on_task_reminder.assert_called_once()

    def test_minutes_round_up(self, service, reminders, notifier):
        task = service.add_task(
            "Call", start_date=date(2025, 3, 5), start_time=time(10, 0), reminder_minutes=30
        )
        reminders.check(datetime(2025, 3, 5, 9, 40, 30))
        notifier.on_task_reminder.assert_called_once_with(task, 20)

    def test_not_after_start(self, service, reminders):
        service.add_task(
            "Call", start_date=date(2025, 3, 5), start_time=time(10, 0), reminder_minutes=30
        )
        assert reminders.due_reminders(at(10, 0)) == []

    def test_zero_offset_disables_reminder(self, service, reminders):
        service.add_task(
            "Call", start_date=date(2025, 3, 5), start_time=time(10, 0), reminder_minutes=0
        )
        assert reminders.due_reminders(at(9, 59)) == []

    def test_only_pending_tasks(self, service, reminders):
        task = service.add_task(
            "Call", start_date=date(2025, 3, 5), start_time=time(10, 0), reminder_minutes=30
        )
        service.lifecycle.start(task)
        assert reminders.due_reminders(at(9, 45)) == []

    def test_unscheduled_tasks_are_skipped(self, service, reminders):
        service.add_task("Anytime", reminder_minutes=30)
        assert reminders.due_reminders(at(9, 45)) == []

    def test_default_offset_from_settings(self, service, reminders, settings):
        settings.default_reminder_minutes = 15
        task = service.add_task("Call", start_date=date(2025, 3, 5), start_time=time(10, 0))
        assert reminders.due_reminders(at(9, 40)) == []
        assert reminders.due_reminders(at(9, 50)) == [task]
