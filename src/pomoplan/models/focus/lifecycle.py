"""Task lifecycle state machine.

States::

    pending -> ongoing <-> partial -> completed
    pending -> missed  (a later explicit start is still allowed)
    completed -> partial | pending  (only through unmark_completed)

Invalid transitions are no-ops: every operation reports whether it changed
anything instead of raising, so callers can check status first or not at all.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from pomoplan.models.task import Interval, Task


class TaskLifecycle:
    """Applies lifecycle transitions to tasks, keeping progress consistent."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or datetime.now

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self._clock()

    @staticmethod
    def _credit_running(task: Task, interval: Interval, now: datetime) -> float:
        """Credit elapsed minutes of a running interval and clear its stamp."""
        if interval.started_at is None:
            return 0.0
        elapsed = max(0.0, (now - interval.started_at).total_seconds() / 60)
        credit = min(elapsed, max(0.0, interval.duration - interval.time_spent))
        interval.time_spent += credit
        task.progress.time_spent += credit
        interval.started_at = None
        return credit

    def start(self, task: Task, now: datetime | None = None) -> bool:
        """Move any non-completed task to ongoing and stamp the current interval."""
        if task.status == "completed":
            return False

        task.status = "ongoing"
        interval = task.current_interval
        if interval is not None and interval.started_at is None:
            interval.started_at = self._now(now)
        return True

    def pause(self, task: Task, now: datetime | None = None) -> bool:
        """Move an ongoing task to partial, crediting the elapsed time."""
        if task.status != "ongoing":
            return False

        interval = task.current_interval
        if interval is not None:
            self._credit_running(task, interval, self._now(now))
        task.status = "partial"
        return True

    def complete_current_interval(
        self, task: Task, now: datetime | None = None
    ) -> Interval | None:
        """Mark the current interval complete and advance the pointer.

        Returns:
            The interval just completed, or None when nothing remains
        """
        interval = task.current_interval
        if interval is None:
            return None

        interval.started_at = None
        remainder = max(0.0, interval.duration - interval.time_spent)
        interval.time_spent += remainder
        task.progress.time_spent += remainder
        interval.completed = True

        progress = task.progress
        if interval.is_focus:
            progress.completed_sessions = min(
                progress.completed_sessions + 1, progress.total_sessions
            )
        progress.current_session = task.first_incomplete_index()

        if progress.total_sessions and progress.completed_sessions >= progress.total_sessions:
            task.status = "completed"
            task.ended_early = False
        return interval

    def mark_as_missed(self, task: Task, now: datetime | None = None) -> bool:
        """Mark a pending task missed once its scheduled start has passed."""
        if task.status != "pending":
            return False
        start = task.scheduled_start
        if start is None or self._now(now) <= start:
            return False
        task.status = "missed"
        return True

    def end_early(self, task: Task, now: datetime | None = None) -> bool:
        """Force every remaining interval complete and mark the task completed.

        Forced focus intervals do not count toward completed sessions, so
        unmarking restores the task exactly where it was left.
        """
        if task.status == "completed":
            return False

        interval = task.current_interval
        if interval is not None:
            self._credit_running(task, interval, self._now(now))

        for interval in task.intervals[task.progress.current_session :]:
            if not interval.completed:
                interval.completed = True
                interval.skipped = True
                interval.started_at = None

        task.progress.current_session = task.first_incomplete_index()
        task.status = "completed"
        task.ended_early = True
        return True

    def unmark_completed(self, task: Task) -> bool:
        """Undo completion.

        Ended-early tasks go back to partial with progress preserved;
        naturally completed tasks go back to pending with progress reset.
        """
        if task.status != "completed":
            return False

        if task.ended_early:
            for interval in task.intervals:
                if interval.skipped:
                    interval.completed = False
                    interval.skipped = False
            task.status = "partial"
            task.ended_early = False
        else:
            for interval in task.intervals:
                interval.completed = False
                interval.skipped = False
                interval.started_at = None
                interval.time_spent = 0.0
            task.status = "pending"
            task.progress.completed_sessions = 0
            task.progress.time_spent = 0.0

        task.progress.current_session = task.first_incomplete_index()
        return True

    def recover_after_restart(self, task: Task) -> bool:
        """Demote a task left ongoing by a previous process to partial.

        The countdown did not survive, so the last-saved progress is kept and
        no running time is credited.
        """
        if task.status != "ongoing":
            return False
        for interval in task.intervals:
            interval.started_at = None
        task.status = "partial"
        return True

    def reconcile_intervals(
        self, task: Task, new_intervals: list[Interval], now: datetime | None = None
    ) -> None:
        """Swap in a regenerated interval list, keeping completed focus work.

        The absolute number of completed focus intervals is preserved (capped
        at the new total); every interval up to and including the last of
        those is marked complete.
        """
        now = self._now(now)
        was_ongoing = task.status == "ongoing"

        running = task.current_interval
        if running is not None:
            self._credit_running(task, running, now)

        total = sum(1 for interval in new_intervals if interval.is_focus)
        completed = min(task.progress.completed_sessions, total)

        if completed:
            seen = 0
            for interval in new_intervals:
                interval.completed = True
                if interval.is_focus:
                    seen += 1
                    if seen == completed:
                        break

        task.intervals = new_intervals
        task.progress.total_sessions = total
        task.progress.completed_sessions = completed
        task.progress.current_session = task.first_incomplete_index()

        if total and completed >= total:
            task.status = "completed"
            task.ended_early = False
        elif task.status == "completed":
            # More work was scheduled than has been done
            task.status = "partial" if completed or task.progress.time_spent else "pending"
            task.ended_early = False
        elif was_ongoing:
            current = task.current_interval
            if current is not None:
                current.started_at = now
