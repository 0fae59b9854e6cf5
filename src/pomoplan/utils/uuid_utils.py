"""UUID utility functions for Pomoplan.

Provides id generation, short UUID display, and prefix resolution.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pomoplan.models.task import Task

# Relaxed UUID pattern (any version)
UUID_RELAXED_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def new_id() -> str:
    """Generate a fresh identifier for tasks and intervals."""
    return str(uuid.uuid4())


def is_valid_uuid(value: str) -> bool:
    """Check if a string is a valid UUID.

    Args:
        value: String to validate

    Returns:
        True if value is a valid UUID
    """
    if not isinstance(value, str):
        return False
    return UUID_RELAXED_PATTERN.match(value) is not None


def is_full_uuid(value: str) -> bool:
    """Check if string is a full UUID (36 characters)."""
    return len(value) == 36 and is_valid_uuid(value)


def shorten_uuid(value: str, length: int = 8) -> str:
    """Get shortened version of UUID.

    Args:
        value: Full UUID string
        length: Number of characters to return (default 8)

    Returns:
        First N characters of UUID
    """
    return value[:length]


def resolve_task_id(
    short_or_full_id: str, tasks: Iterable[Task], min_length: int = 4
) -> str:
    """Resolve a short or full id to the id of exactly one task.

    Args:
        short_or_full_id: Either a full id or a prefix (min ``min_length`` chars)
        tasks: Task collection to search
        min_length: Minimum length for prefixes

    Returns:
        Full task id

    Raises:
        TaskNotFoundError: If no task matches
        ValueError: If the prefix is too short or ambiguous
    """
    from pomoplan.models.exceptions import TaskNotFoundError

    needle = short_or_full_id.lower().strip().lstrip("#")
    tasks = list(tasks)

    for task in tasks:
        if task.id == needle:
            return task.id

    if len(needle) < min_length:
        raise ValueError(
            f"ID must be at least {min_length} characters. "
            f"Got: {needle} ({len(needle)} chars)"
        )

    matches = [task for task in tasks if task.id.startswith(needle)]
    if not matches:
        raise TaskNotFoundError(needle)

    if len(matches) > 1:
        shown = ", ".join(shorten_uuid(t.id) for t in matches[:5])
        if len(matches) > 5:
            shown += f", ... ({len(matches)} total)"
        raise ValueError(f"Ambiguous ID '{needle}' matches {len(matches)} tasks: {shown}")

    return matches[0].id
