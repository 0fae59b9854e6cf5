"""Pomoplan domain models.

This package contains the Pydantic models for tasks, intervals and settings,
plus the focus-session machinery (interval generation, lifecycle, countdown).
"""

from .config_models import AppConfig, NotificationConfig, TimerPreset
from .exceptions import (
    ConfigurationError,
    PersistenceError,
    PomoplanError,
    TaskNotFoundError,
)
from .task import (
    PRIORITY_RANK,
    Interval,
    IntervalType,
    Progress,
    Task,
    TaskCreate,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
    TimerPreference,
    priority_rank,
)

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "Interval",
    "Progress",
    "TimerPreference",
    "TaskStatus",
    "TaskPriority",
    "IntervalType",
    "PRIORITY_RANK",
    "priority_rank",
    # Config models
    "AppConfig",
    "NotificationConfig",
    "TimerPreset",
    # Errors
    "PomoplanError",
    "ConfigurationError",
    "TaskNotFoundError",
    "PersistenceError",
]
