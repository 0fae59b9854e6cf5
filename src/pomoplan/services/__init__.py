"""Services module for Pomoplan - Business logic layer."""

from .config_service import ConfigService
from .notification_service import (
    ConsoleNotificationSink,
    LoggingNotificationSink,
    NotificationSink,
    ViewHooks,
)
from .recurring_service import RecurringService
from .reminder_service import ReminderService
from .task_service import TaskService
from .timer_controller import PausedSnapshot, TimerController

__all__ = [
    "TaskService",
    "TimerController",
    "PausedSnapshot",
    "RecurringService",
    "ReminderService",
    "ConfigService",
    "NotificationSink",
    "ConsoleNotificationSink",
    "LoggingNotificationSink",
    "ViewHooks",
]
