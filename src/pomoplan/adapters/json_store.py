"""JSON document adapter for the task repository.

The whole collection lives in one document::

    {"version": 1, "tasks": [...]}

Writes go to a temporary file in the same directory and are moved into place
with ``os.replace``, so a crash mid-write never leaves a truncated store.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from pomoplan.models import AppConfig, PersistenceError, Task
from pomoplan.repositories.repository import TaskRepository
from pomoplan.services.config_service import ConfigService

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_tasks_adapter = TypeAdapter(list[Task])


class JsonTaskRepository(TaskRepository):
    """Task repository backed by a JSON file.

    Args:
        path: Location of the tasks document
        config_service: Settings source; a default ConfigService if omitted
    """

    def __init__(self, path: Path, config_service: ConfigService | None = None):
        self.path = Path(path)
        self._config_service = config_service

    def load_tasks(self) -> list[Task]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e

        try:
            document = json.loads(raw)
            if isinstance(document, list):
                # Bare list, written before the versioned envelope
                items = document
            else:
                items = document["tasks"]
            return _tasks_adapter.validate_python(items)
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            quarantine = self._quarantine()
            logger.error(
                "Unreadable task store %s moved to %s: %s", self.path, quarantine, e
            )
            return []

    def save_tasks(self, tasks: list[Task]) -> None:
        document = {
            "version": FORMAT_VERSION,
            "tasks": _tasks_adapter.dump_python(tasks, mode="json"),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to save tasks to {self.path}: {e}") from e
        logger.debug("Saved %d tasks to %s", len(tasks), self.path)

    def load_settings(self) -> AppConfig:
        if self._config_service is None:
            self._config_service = ConfigService()
        return self._config_service.config

    def _quarantine(self) -> Path:
        target = self.path.with_suffix(self.path.suffix + ".corrupt")
        try:
            os.replace(self.path, target)
        except OSError as e:
            raise PersistenceError(f"Failed to quarantine {self.path}: {e}") from e
        return target
