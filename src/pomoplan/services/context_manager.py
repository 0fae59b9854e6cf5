"""Bootstrap of the service graph used by the CLI.

Everything below the command layer receives its collaborators explicitly;
this module is the one place that reads the user's config and picks the
concrete adapters.

Usage Pattern:
    from pomoplan.services.context_manager import get_task_service

    service = get_task_service()
    service.add_task("Write report", estimated_minutes=90)
"""

from __future__ import annotations

from pomoplan.adapters.json_store import JsonTaskRepository
from pomoplan.services.config_service import get_config_service
from pomoplan.services.notification_service import ConsoleNotificationSink
from pomoplan.services.task_service import TaskService
from pomoplan.utils.ui.console import get_console


def get_task_service() -> TaskService:
    """Build a loaded TaskService over the user's JSON task store.

    Loading repairs state left by an earlier run (interrupted tasks become
    partial, overdue ones missed) and rolls the recurring window forward.
    """
    config_service = get_config_service()
    config = config_service.config
    repository = JsonTaskRepository(config_service.tasks_path, config_service)
    service = TaskService(
        repository,
        settings=config,
        notifier=ConsoleNotificationSink(get_console(), config.notifications),
    )
    service.load()
    service.recurring.schedule_all()
    return service
