"""Tests for the priority resolver."""

from __future__ import annotations

from datetime import date, datetime, time

from pomoplan.models import Task
from pomoplan.services.priority_service import higher_priority, next_due_task

DAY = date(2025, 3, 5)


def task(name, priority, start=None, status="pending") -> Task:
    return Task(
        name=name,
        priority=priority,
        status=status,
        start_date=DAY if start else None,
        start_time=start,
    )


class TestHigherPriority:
    def test_suggests_outranking_pending_task(self):
        current = task("Chores", "medium", status="ongoing")
        high = task("Incident", "high", time(9, 0))
        low = task("Filing", "low", time(8, 0))

        assert higher_priority(current, [high, low]) is high

    def test_no_current_task(self):
        assert higher_priority(None, [task("Incident", "high")]) is None

    def test_equal_priority_is_not_higher(self):
        current = task("Chores", "medium", status="ongoing")
        assert higher_priority(current, [task("Other", "medium", time(7, 0))]) is None

    def test_only_pending_candidates(self):
        current = task("Chores", "low", status="ongoing")
        candidates = [
            task("Missed", "high", time(7, 0), status="missed"),
            task("Partial", "high", status="partial"),
            task("Done", "high", status="completed"),
        ]
        assert higher_priority(current, candidates) is None

    def test_current_task_is_excluded(self):
        current = task("Chores", "low")
        assert higher_priority(current, [current]) is None

    def test_rank_then_earliest_start(self):
        current = task("Chores", "low", status="ongoing")
        medium = task("Medium early", "medium", time(6, 0))
        late = task("High late", "high", time(11, 0))
        early = task("High early", "high", time(10, 0))
        assert higher_priority(current, [medium, late, early]) is early

    def test_unscheduled_sorts_after_scheduled(self):
        current = task("Chores", "low", status="ongoing")
        floating = task("Floating", "high")
        scheduled = task("Scheduled", "high", time(23, 0))
        assert higher_priority(current, [floating, scheduled]) is scheduled


class TestNextDueTask:
    def test_picks_best_task_already_due(self):
        now = datetime(2025, 3, 5, 9, 0)
        due_low = task("Low", "low", time(8, 0))
        due_high = task("High", "high", time(8, 30), status="missed")
        future = task("Future", "high", time(10, 0))

        assert next_due_task([due_low, due_high, future], now) is due_high

    def test_nothing_due(self):
        now = datetime(2025, 3, 5, 9, 0)
        assert next_due_task([task("Later", "high", time(10, 0)), task("Any", "low")], now) is None
