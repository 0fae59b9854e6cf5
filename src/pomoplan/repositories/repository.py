"""Repository abstraction layer for Pomoplan.

This module defines the persistent-store port, following the hexagonal
architecture (Ports & Adapters) pattern. The engine saves the whole task
collection after every mutation; how the collection is encoded is entirely
up to the adapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pomoplan.models import AppConfig, Task


class TaskRepository(ABC):
    """Abstract base class for task persistence.

    Adapters must make ``save_tasks`` all-or-nothing from the caller's point
    of view: either the new collection is stored or ``PersistenceError`` is
    raised and the previous document is left intact.
    """

    @abstractmethod
    def load_tasks(self) -> list[Task]:
        """Load the stored task collection.

        Returns:
            List of Task objects, empty if nothing has been stored yet

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
            PersistenceError: If the store cannot be read
        """
        raise NotImplementedError(
            "TaskRepository.load_tasks() must be implemented by adapter"
        )

    @abstractmethod
    def save_tasks(self, tasks: list[Task]) -> None:
        """Replace the stored task collection.

        Args:
            tasks: The full collection to persist

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
            PersistenceError: If the write fails
        """
        raise NotImplementedError(
            "TaskRepository.save_tasks() must be implemented by adapter"
        )

    @abstractmethod
    def load_settings(self) -> AppConfig:
        """Load user settings.

        Returns:
            AppConfig, with defaults for anything not stored

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError(
            "TaskRepository.load_settings() must be implemented by adapter"
        )
