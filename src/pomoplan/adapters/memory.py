"""In-memory task repository, for tests and embedding."""

from __future__ import annotations

from pomoplan.models import AppConfig, Task
from pomoplan.repositories.repository import TaskRepository


class InMemoryTaskRepository(TaskRepository):
    """Keeps deep copies of the saved collection.

    Copies are taken on both save and load so callers never share model
    instances with the store, mirroring a real serializing backend.
    """

    def __init__(
        self, tasks: list[Task] | None = None, settings: AppConfig | None = None
    ):
        self._tasks = [task.model_copy(deep=True) for task in tasks or []]
        self.settings = settings or AppConfig()
        self.save_count = 0

    def load_tasks(self) -> list[Task]:
        return [task.model_copy(deep=True) for task in self._tasks]

    def save_tasks(self, tasks: list[Task]) -> None:
        self._tasks = [task.model_copy(deep=True) for task in tasks]
        self.save_count += 1

    def load_settings(self) -> AppConfig:
        return self.settings
