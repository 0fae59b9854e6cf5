"""Task service - Business logic for the task collection.

This service layer sits between commands (and the timer controller) and the
repository. It owns the in-memory task collection, validates edits, keeps
interval lists consistent with timing changes, and saves after every
mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from pomoplan.models import (
    AppConfig,
    ConfigurationError,
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskStatus,
    TaskUpdate,
    TimerPreference,
    priority_rank,
)
from pomoplan.models.focus.intervals import generate_intervals, new_progress
from pomoplan.models.focus.lifecycle import TaskLifecycle
from pomoplan.repositories import TaskRepository
from pomoplan.services.notification_service import NotificationSink, ViewHooks, notify
from pomoplan.services.priority_service import higher_priority
from pomoplan.services.recurring_service import RecurringService
from pomoplan.utils.recurrence import weekday_index
from pomoplan.utils.uuid_utils import resolve_task_id

logger = logging.getLogger(__name__)

_SCHEDULE_FIELDS = ("start_date", "start_time", "due_date", "due_time")
_PLAIN_FIELDS = (
    "name",
    "priority",
    "reminder_minutes",
    "recurring_days",
    "use_focus_mode",
    "tags",
    "start_with_break",
)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(p) for p in item["loc"]) or "value"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


class TaskService:
    """Service for task business logic.

    Args:
        repository: Persistent store
        settings: Settings; loaded from the repository if omitted
        notifier: Receives task-missed notifications
        views: Redrawn after every mutation
        clock: Returns the current local time
    """

    def __init__(
        self,
        repository: TaskRepository,
        settings: AppConfig | None = None,
        notifier: NotificationSink | None = None,
        views: ViewHooks | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repository = repository
        self.settings = settings or repository.load_settings()
        self.notifier = notifier or NotificationSink()
        self.views = views or ViewHooks()
        self.clock = clock or datetime.now
        self.lifecycle = TaskLifecycle(clock=self.clock)
        self.recurring = RecurringService(
            self, lookahead_days=self.settings.recurring_lookahead_days
        )
        self._tasks: list[Task] = []

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------

    def load(self) -> list[Task]:
        """Load the collection and repair state left by a previous run.

        Tasks left ongoing become partial (their countdown did not survive),
        then overdue pending tasks are marked missed.

        Raises:
            PersistenceError: If the store cannot be read, or the repaired
                collection cannot be saved
        """
        self._tasks = self.repository.load_tasks()

        recovered = [t for t in self._tasks if self.lifecycle.recover_after_restart(t)]
        for task in recovered:
            logger.info("Recovered interrupted task %s as partial", task.id)

        missed = self._sweep_missed(self.clock())
        if recovered or missed:
            self.save()
        logger.debug("Loaded %d tasks", len(self._tasks))
        return self.tasks

    def save(self) -> None:
        """Refresh views, then persist the collection.

        Raises:
            PersistenceError: If the repository write fails. The in-memory
                collection stays authoritative either way.
        """
        notify(self.views, "refresh_task_list")
        notify(self.views, "refresh_calendar")
        self.repository.save_tasks(self._tasks)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def find_task(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def get_task(self, task_id: str) -> Task:
        """Get a task by id.

        Raises:
            TaskNotFoundError: If no task has this id
        """
        task = self.find_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def resolve_id(self, short_or_full_id: str) -> str:
        """Resolve a (possibly shortened) id against the collection."""
        return resolve_task_id(short_or_full_id, self._tasks)

    def list_tasks(self, status: TaskStatus | None = None) -> list[Task]:
        if status is None:
            return self.tasks
        return [task for task in self._tasks if task.status == status]

    def pending_tasks(self) -> list[Task]:
        """Pending and missed tasks, missed first, then by start and priority."""
        waiting = [t for t in self._tasks if t.status in ("pending", "missed")]
        return sorted(
            waiting,
            key=lambda t: (
                t.status != "missed",
                t.scheduled_start or datetime.max,
                priority_rank(t.priority),
                -t.created_at.timestamp(),
            ),
        )

    def active_tasks(self) -> list[Task]:
        """Ongoing and partial tasks."""
        return [t for t in self._tasks if t.status in ("ongoing", "partial")]

    def tasks_for_date(self, day: date) -> list[Task]:
        """Tasks starting or due on a day, plus templates recurring on it."""
        weekday = weekday_index(day)
        return [
            t
            for t in self._tasks
            if t.start_date == day
            or t.due_date == day
            or (t.is_recurring_template and weekday in t.recurring_days)
        ]

    def higher_priority_than(self, task: Task | None) -> Task | None:
        """Preemption suggestion for ``task`` among pending tasks."""
        return higher_priority(task, self.pending_tasks())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_task(self, name: str = "Untitled Task", **fields: Any) -> Task:
        """Validate raw fields and create a task.

        Raises:
            ConfigurationError: If any field fails validation
        """
        try:
            data = TaskCreate(name=name, **fields)
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e
        return self.create_task(data)

    def create_task(self, data: TaskCreate) -> Task:
        """Create a task, generate its intervals and save.

        Recurring templates are expanded into instances right away.

        Raises:
            ConfigurationError: If a duration or length is not positive
            PersistenceError: If the save fails (the task is kept in memory)
        """
        use_custom = data.focus_minutes is not None or data.break_minutes is not None
        focus = data.focus_minutes or self.settings.focus_duration
        brk = data.break_minutes or self.settings.break_duration
        self._validate_timing(data.estimated_minutes, focus, brk)

        intervals = generate_intervals(
            data.estimated_minutes, focus, brk, data.start_with_break
        )
        reminder = data.reminder_minutes
        if reminder is None:
            reminder = self.settings.default_reminder_minutes

        task = Task(
            name=data.name,
            priority=data.priority,
            estimated_minutes=data.estimated_minutes,
            start_date=data.start_date,
            start_time=data.start_time,
            due_date=data.due_date,
            due_time=data.due_time,
            reminder_minutes=reminder,
            timer=TimerPreference(
                focus_minutes=focus, break_minutes=brk, use_custom=use_custom
            ),
            start_with_break=data.start_with_break,
            recurring_days=data.recurring_days,
            intervals=intervals,
            progress=new_progress(intervals),
            use_focus_mode=data.use_focus_mode,
            tags=data.tags,
        )
        self._tasks.append(task)
        logger.info("Created task %s (%s)", task.id, task.name)

        if task.is_recurring_template:
            self.recurring.expand(task)
        self.save()
        return task

    def insert_task(self, task: Task) -> None:
        """Add a fully built task to the collection without saving."""
        self._tasks.append(task)

    def update_task(self, task_id: str, **fields: Any) -> Task:
        """Validate raw fields and apply them to a task.

        Raises:
            ConfigurationError: If any field fails validation
            TaskNotFoundError: If the task does not exist
        """
        try:
            update = TaskUpdate(**fields)
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e
        return self.apply_update(task_id, update)

    def apply_update(self, task_id: str, update: TaskUpdate) -> Task:
        """Apply an edit, regenerating intervals when timing changed.

        Timing edits keep the number of completed focus intervals (see
        ``TaskLifecycle.reconcile_intervals``). Template edits propagate to
        future instances and re-expand the schedule.

        Raises:
            TaskNotFoundError: If the task does not exist
            ConfigurationError: If a duration or length is not positive
            PersistenceError: If the save fails (the edit is kept in memory)
        """
        task = self.get_task(task_id)
        changes = update.model_dump(exclude_unset=True)
        was_template = task.is_recurring_template

        timer = self._resolve_timer(task, changes)
        estimated = changes.get("estimated_minutes") or task.estimated_minutes
        self._validate_timing(estimated, timer.focus_minutes, timer.break_minutes)

        timing_changed = (
            estimated != task.estimated_minutes
            or timer != task.timer
            or changes.get("start_with_break") not in (None, task.start_with_break)
        )

        for field in _PLAIN_FIELDS:
            if changes.get(field) is not None:
                setattr(task, field, changes[field])
        # Explicit None clears optional schedule fields
        for field in _SCHEDULE_FIELDS:
            if field in changes:
                setattr(task, field, changes[field])
        task.estimated_minutes = estimated
        task.timer = timer

        if timing_changed:
            self.regenerate_intervals(task)

        if was_template or task.is_recurring_template:
            propagated = {
                key: value
                for key, value in changes.items()
                if key in RecurringService.PROPAGATED_FIELDS
            }
            if propagated:
                self.recurring.propagate(task, propagated)
            if task.is_recurring_template:
                self.recurring.expand(task)

        logger.info("Updated task %s: %s", task.id, ", ".join(sorted(changes)) or "no changes")
        self.save()
        return task

    def regenerate_intervals(self, task: Task) -> None:
        """Rebuild a task's intervals from its timing, keeping completed work."""
        intervals = generate_intervals(
            task.estimated_minutes,
            task.timer.focus_minutes,
            task.timer.break_minutes,
            task.start_with_break,
        )
        self.lifecycle.reconcile_intervals(task, intervals)

    def deletion_targets(self, task_id: str) -> list[str]:
        """Ids removed by deleting ``task_id``: itself plus future instances."""
        task = self.get_task(task_id)
        ids = [task.id]
        if task.is_recurring_template:
            ids.extend(t.id for t in self.recurring.future_instances(task.id))
        return ids

    def delete_task(self, task_id: str) -> list[str]:
        """Delete a task (and, for a template, its future instances).

        Returns:
            Ids of every removed task

        Raises:
            TaskNotFoundError: If the task does not exist
            PersistenceError: If the save fails (the deletion is kept in memory)
        """
        ids = set(self.deletion_targets(task_id))
        self._tasks = [t for t in self._tasks if t.id not in ids]
        logger.info("Deleted %d task(s) starting with %s", len(ids), task_id)
        self.save()
        return [task_id, *sorted(ids - {task_id})]

    def remove_tasks(self, ids: set[str]) -> None:
        """Drop tasks from the collection without saving."""
        self._tasks = [t for t in self._tasks if t.id not in ids]

    def unmark_completed(self, task_id: str) -> Task:
        """Undo completion of a task (see ``TaskLifecycle.unmark_completed``)."""
        task = self.get_task(task_id)
        if self.lifecycle.unmark_completed(task):
            logger.info("Unmarked task %s, now %s", task.id, task.status)
            self.save()
        return task

    def check_for_missed_tasks(self, now: datetime | None = None) -> list[Task]:
        """Mark overdue pending tasks missed and notify for each."""
        missed = self._sweep_missed(now or self.clock())
        if missed:
            self.save()
        return missed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _sweep_missed(self, now: datetime) -> list[Task]:
        missed = [t for t in self._tasks if self.lifecycle.mark_as_missed(t, now)]
        for task in missed:
            logger.info("Task %s missed its start", task.id)
            notify(self.notifier, "on_task_missed", task)
        return missed

    def _resolve_timer(self, task: Task, changes: dict[str, Any]) -> TimerPreference:
        focus = changes.get("focus_minutes")
        brk = changes.get("break_minutes")
        use_custom = changes.get("use_custom_timer")

        if use_custom is False:
            return TimerPreference(
                focus_minutes=self.settings.focus_duration,
                break_minutes=self.settings.break_duration,
                use_custom=False,
            )
        if focus is None and brk is None:
            return task.timer.model_copy()
        return TimerPreference(
            focus_minutes=focus or task.timer.focus_minutes,
            break_minutes=brk or task.timer.break_minutes,
            use_custom=True,
        )

    @staticmethod
    def _validate_timing(estimated: int, focus: int, brk: int) -> None:
        if estimated <= 0:
            raise ConfigurationError(f"Estimated duration must be positive, got {estimated}")
        if focus <= 0:
            raise ConfigurationError(f"Focus length must be positive, got {focus}")
        if brk <= 0:
            raise ConfigurationError(f"Break length must be positive, got {brk}")
