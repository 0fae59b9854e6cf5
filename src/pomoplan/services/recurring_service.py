"""Recurring task instantiation.

A template is any task with recurring weekdays that is not itself an
instance. Instances are ordinary tasks dated to one day and linked back by
``recurring_parent_id``; ``(start_date, recurring_parent_id)`` identifies an
instance, so expansion can be re-run freely.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from pomoplan.models import Task
from pomoplan.models.focus.intervals import generate_intervals, new_progress
from pomoplan.utils.recurrence import weekday_index

if TYPE_CHECKING:
    from pomoplan.services.task_service import TaskService

logger = logging.getLogger(__name__)


class RecurringService:
    """Expands templates into dated instances over a rolling window.

    ``schedule_*`` and ``delete_future_instances`` save the collection;
    ``expand``, ``propagate`` and ``remove_future_instances`` leave saving to
    the caller so a single edit results in a single write.

    Args:
        task_service: Owner of the task collection
        lookahead_days: Days after today to schedule (today is always included)
    """

    # Template fields copied onto future instances when edited.
    PROPAGATED_FIELDS = frozenset(
        {
            "name",
            "priority",
            "reminder_minutes",
            "estimated_minutes",
            "focus_minutes",
            "break_minutes",
            "use_custom_timer",
        }
    )

    def __init__(self, task_service: TaskService, lookahead_days: int = 7):
        self.task_service = task_service
        self.lookahead_days = lookahead_days

    def _today(self, today: date | None) -> date:
        return today or self.task_service.clock().date()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def templates(self) -> list[Task]:
        return [t for t in self.task_service.tasks if t.is_recurring_template]

    def instances(self, template_id: str) -> list[Task]:
        return [
            t for t in self.task_service.tasks if t.recurring_parent_id == template_id
        ]

    def future_instances(self, template_id: str, today: date | None = None) -> list[Task]:
        """Instances dated today or later, in date order."""
        today = self._today(today)
        future = [
            t
            for t in self.instances(template_id)
            if t.start_date is not None and t.start_date >= today
        ]
        return sorted(future, key=lambda t: t.start_date)

    def next_instance(self, template_id: str, today: date | None = None) -> Task | None:
        future = self.future_instances(template_id, today)
        return future[0] if future else None

    def window(self, today: date | None = None) -> list[date]:
        today = self._today(today)
        return [today + timedelta(days=n) for n in range(self.lookahead_days + 1)]

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def build_instance(self, template: Task, day: date) -> Task:
        """Create (without storing) the instance of ``template`` for ``day``.

        The instance starts pending with fresh intervals. A template due date
        keeps its offset from the template's start date.
        """
        intervals = generate_intervals(
            template.estimated_minutes,
            template.timer.focus_minutes,
            template.timer.break_minutes,
            template.start_with_break,
        )

        due_date = None
        if template.due_date is not None and template.start_date is not None:
            due_date = day + (template.due_date - template.start_date)

        return Task(
            name=template.name,
            priority=template.priority,
            estimated_minutes=template.estimated_minutes,
            start_date=day,
            start_time=template.start_time,
            due_date=due_date,
            due_time=template.due_time if due_date else None,
            reminder_minutes=template.reminder_minutes,
            timer=template.timer.model_copy(),
            start_with_break=template.start_with_break,
            intervals=intervals,
            progress=new_progress(intervals),
            use_focus_mode=template.use_focus_mode,
            tags=list(template.tags),
            recurring_parent_id=template.id,
        )

    def expand(self, template: Task, today: date | None = None) -> list[Task]:
        """Ensure one instance per matching day in the window.

        Returns:
            The instances created by this call (empty when up to date)
        """
        if not template.is_recurring_template:
            return []

        existing = {t.start_date for t in self.instances(template.id)}
        created = []
        for day in self.window(today):
            if weekday_index(day) not in template.recurring_days or day in existing:
                continue
            instance = self.build_instance(template, day)
            self.task_service.insert_task(instance)
            existing.add(day)
            created.append(instance)

        if created:
            logger.info(
                "Scheduled %d instance(s) of template %s", len(created), template.id
            )
        return created

    def schedule_instances(self, template_id: str, today: date | None = None) -> list[Task]:
        """Expand one template and save if anything was created."""
        template = self.task_service.get_task(template_id)
        created = self.expand(template, today)
        if created:
            self.task_service.save()
        return created

    def schedule_all(self, today: date | None = None) -> list[Task]:
        """Expand every template (startup or daily roll-over), saving once."""
        created = []
        for template in self.templates():
            created.extend(self.expand(template, today))
        if created:
            self.task_service.save()
        return created

    # ------------------------------------------------------------------
    # Template edits
    # ------------------------------------------------------------------

    def propagate(
        self, template: Task, changes: dict[str, Any], today: date | None = None
    ) -> list[Task]:
        """Copy an edit of ``template`` onto its future instances.

        Only ``PROPAGATED_FIELDS`` are considered; past instances are left
        alone. Duration or timer changes regenerate the instance's intervals,
        keeping any completed focus work.

        Returns:
            The instances that were updated
        """
        fields = {k: v for k, v in changes.items() if k in self.PROPAGATED_FIELDS}
        if not fields:
            return []

        updated = []
        for instance in self.future_instances(template.id, today):
            for field in ("name", "priority", "reminder_minutes"):
                if fields.get(field) is not None:
                    setattr(instance, field, getattr(template, field))

            timing_changed = False
            if "estimated_minutes" in fields and (
                instance.estimated_minutes != template.estimated_minutes
            ):
                instance.estimated_minutes = template.estimated_minutes
                timing_changed = True
            if {"focus_minutes", "break_minutes", "use_custom_timer"} & fields.keys():
                timer = template.timer.model_copy()
                if timer != instance.timer:
                    instance.timer = timer
                    timing_changed = True

            if timing_changed:
                self.task_service.regenerate_intervals(instance)
            updated.append(instance)

        if updated:
            logger.info(
                "Propagated %s to %d instance(s) of %s",
                ", ".join(sorted(fields)),
                len(updated),
                template.id,
            )
        return updated

    def remove_future_instances(self, template_id: str, today: date | None = None) -> list[str]:
        ids = [t.id for t in self.future_instances(template_id, today)]
        self.task_service.remove_tasks(set(ids))
        return ids

    def delete_future_instances(self, template_id: str, today: date | None = None) -> list[str]:
        """Delete future instances of a template and save.

        Returns:
            Ids of the removed instances
        """
        ids = self.remove_future_instances(template_id, today)
        if ids:
            self.task_service.save()
        return ids
