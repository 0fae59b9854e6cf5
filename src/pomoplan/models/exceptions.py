"""Exception hierarchy for Pomoplan."""


class PomoplanError(Exception):
    """Base exception for all Pomoplan errors."""


class ConfigurationError(PomoplanError):
    """Raised when task timing configuration is invalid (non-positive lengths)."""


class TaskNotFoundError(PomoplanError):
    """Raised when a task id does not resolve to a known task."""

    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' not found")
        self.task_id = task_id


class PersistenceError(PomoplanError):
    """Raised when the task store cannot be read or written.

    In-memory state stays authoritative; callers decide whether to retry
    or warn the user.
    """
