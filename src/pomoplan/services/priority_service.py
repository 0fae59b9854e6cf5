"""Priority resolver.

Pure queries over a task collection. Suggestions are advisory: nothing here
switches or pauses anything.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from pomoplan.models import Task, priority_rank


def _sort_key(task: Task) -> tuple[int, int, datetime]:
    start = task.scheduled_start
    # Unscheduled tasks sort after every scheduled one of the same rank
    return (priority_rank(task.priority), start is None, start or datetime.max)


def higher_priority(current: Task | None, pending: Iterable[Task]) -> Task | None:
    """Find a pending task that outranks the current one.

    Args:
        current: The active task, or None
        pending: Candidate tasks; anything not pending is ignored

    Returns:
        The best candidate by (priority, scheduled start), or None
    """
    if current is None:
        return None

    current_rank = priority_rank(current.priority)
    candidates = [
        task
        for task in pending
        if task.id != current.id
        and task.status == "pending"
        and priority_rank(task.priority) < current_rank
    ]
    if not candidates:
        return None
    return min(candidates, key=_sort_key)


def next_due_task(pending: Iterable[Task], now: datetime) -> Task | None:
    """Best pending task whose scheduled start has already passed."""
    due = [
        task
        for task in pending
        if task.status in ("pending", "missed")
        and task.scheduled_start is not None
        and task.scheduled_start <= now
    ]
    if not due:
        return None
    return min(due, key=_sort_key)
