"""Interval generation for focus sessions."""

from __future__ import annotations

import math

from pomoplan.models.task import Interval, Progress


def generate_intervals(
    estimated_minutes: int,
    focus_minutes: int,
    break_minutes: int,
    start_with_break: bool = False,
) -> list[Interval]:
    """Build the ordered focus/break schedule for a task.

    The focus count is always rounded up, so the scheduled focus time may
    exceed the estimate by up to ``focus_minutes - 1``. The list ends on a
    focus interval and may begin with a single break.

    Args:
        estimated_minutes: Estimated work duration
        focus_minutes: Length of each focus interval
        break_minutes: Length of each break interval
        start_with_break: Prepend a break before the first focus interval

    Returns:
        Fresh intervals with new ids

    Raises:
        ValueError: If any length is not positive (callers validate first)
    """
    if estimated_minutes <= 0 or focus_minutes <= 0 or break_minutes <= 0:
        raise ValueError(
            "estimated_minutes, focus_minutes and break_minutes must be positive"
        )

    focus_count = math.ceil(estimated_minutes / focus_minutes)
    intervals: list[Interval] = []

    if start_with_break:
        intervals.append(Interval(type="break", duration=break_minutes))

    for i in range(focus_count):
        intervals.append(Interval(type="focus", duration=focus_minutes))
        if i < focus_count - 1:
            intervals.append(Interval(type="break", duration=break_minutes))

    return intervals


def new_progress(intervals: list[Interval]) -> Progress:
    """Zeroed progress for a freshly generated interval list."""
    return Progress(
        completed_sessions=0,
        total_sessions=sum(1 for interval in intervals if interval.is_focus),
        current_session=0,
        time_spent=0.0,
    )
