"""Focus session machinery: interval generation, lifecycle and countdown."""

from .countdown import CountdownProcess
from .intervals import generate_intervals, new_progress
from .lifecycle import TaskLifecycle

__all__ = [
    "CountdownProcess",
    "TaskLifecycle",
    "generate_intervals",
    "new_progress",
]
