"""Recurrence utility functions for the Pomoplan CLI.

Weekdays are indexed 0=Sunday through 6=Saturday throughout Pomoplan.
"""

from __future__ import annotations

from datetime import date

WEEKDAY_NAMES: list[str] = [
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
]

# Maps human-friendly names to weekday index sets.
RECURRENCE_PATTERNS: dict[str, list[int]] = {
    "daily": [0, 1, 2, 3, 4, 5, 6],
    "weekdays": [1, 2, 3, 4, 5],
    "weekends": [0, 6],
}

VALID_PATTERNS = list(RECURRENCE_PATTERNS.keys())


def weekday_index(day: date) -> int:
    """Weekday index of a date with Sunday as 0."""
    return (day.weekday() + 1) % 7


def resolve_days(pattern: str) -> list[int]:
    """Convert a pattern name or comma-separated day list to weekday indices.

    Accepts ``daily``, ``weekdays``, ``weekends``, full or three-letter day
    names (``mon,wed,fri``) and raw indices (``1,3,5``).

    Args:
        pattern: Pattern or day list

    Returns:
        Sorted, de-duplicated weekday indices

    Raises:
        ValueError: If any part is not recognized
    """
    pattern = pattern.strip().lower()
    if pattern in RECURRENCE_PATTERNS:
        return list(RECURRENCE_PATTERNS[pattern])

    days: set[int] = set()
    for part in filter(None, (p.strip() for p in pattern.split(","))):
        if part.isdigit():
            index = int(part)
            if not 0 <= index <= 6:
                raise ValueError(f"Weekday index out of range (0-6): {part}")
            days.add(index)
            continue
        for index, name in enumerate(WEEKDAY_NAMES):
            if part == name or part == name[:3]:
                days.add(index)
                break
        else:
            raise ValueError(f"Unknown weekday: {part}")

    if not days:
        raise ValueError("No weekdays given")
    return sorted(days)


def describe_days(days: list[int]) -> str:
    """Convert weekday indices back to a human-readable description."""
    normalized = sorted(set(days))
    if not normalized:
        return "never"
    for name, pattern in RECURRENCE_PATTERNS.items():
        if normalized == pattern:
            return name
    return ", ".join(WEEKDAY_NAMES[d][:3].capitalize() for d in normalized)
