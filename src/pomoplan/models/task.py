"""Task data models.

A task owns an ordered list of focus/break intervals generated from its
estimated duration, plus the progress bookkeeping derived from them.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from pomoplan.utils.uuid_utils import new_id

TaskStatus = Literal["pending", "ongoing", "partial", "completed", "missed"]
TaskPriority = Literal["high", "medium", "low"]
IntervalType = Literal["focus", "break"]

# Lower rank is more urgent.
PRIORITY_RANK: dict[str, int] = {"high": 1, "medium": 2, "low": 3}


def priority_rank(priority: str) -> int:
    """Return the numeric rank of a priority name (unknown names sort last)."""
    return PRIORITY_RANK.get(priority, len(PRIORITY_RANK) + 1)


def _validate_weekdays(days: list[int]) -> list[int]:
    for day in days:
        if not 0 <= day <= 6:
            raise ValueError(f"weekday index must be 0-6 (0=Sunday), got {day}")
    return sorted(set(days))


class Interval(BaseModel):
    """One scheduled work or rest period.

    Attributes:
        id: Unique identifier, never shared between tasks
        type: "focus" or "break"
        duration: Configured length in minutes
        completed: Whether the interval has been finished
        started_at: Set only while the interval is actively running
        time_spent: Minutes already credited to progress by earlier pauses
        skipped: Completed by ending the task early rather than by running
    """

    id: str = Field(default_factory=new_id)
    type: IntervalType
    duration: int = Field(gt=0)
    completed: bool = False
    started_at: datetime | None = None
    time_spent: float = Field(default=0.0, ge=0)
    skipped: bool = False

    @property
    def is_focus(self) -> bool:
        return self.type == "focus"

    @property
    def duration_seconds(self) -> int:
        return self.duration * 60


class Progress(BaseModel):
    """Progress bookkeeping embedded in a task.

    Attributes:
        completed_sessions: Completed focus intervals
        total_sessions: Focus intervals in the list
        current_session: Index of the first incomplete interval
        time_spent: Cumulative minutes worked
    """

    completed_sessions: int = Field(default=0, ge=0)
    total_sessions: int = Field(default=0, ge=0)
    current_session: int = Field(default=0, ge=0)
    time_spent: float = Field(default=0.0, ge=0)


class TimerPreference(BaseModel):
    """Focus/break lengths for a task.

    When ``use_custom`` is False the lengths mirror the global settings.
    """

    focus_minutes: int = Field(default=25, gt=0)
    break_minutes: int = Field(default=5, gt=0)
    use_custom: bool = False


class Task(BaseModel):
    """Task model representing a unit of scheduled work.

    Attributes:
        id: Unique identifier for the task
        name: Task title
        priority: "high", "medium" or "low"
        status: Lifecycle status
        estimated_minutes: Estimated work duration
        start_date: Optional scheduled day
        start_time: Optional scheduled time of day
        due_date: Optional due day
        due_time: Optional due time of day
        reminder_minutes: Reminder offset before the scheduled start
        timer: Focus/break length preference
        start_with_break: Schedule a break before the first focus interval
        recurring_days: Weekday indices (0=Sunday) for recurring templates
        intervals: Ordered focus/break intervals
        progress: Derived progress record
        use_focus_mode: Enter focus mode whenever the timer starts
        tags: Free-form tags
        created_at: Creation timestamp
        ended_early: Completed via end-early instead of finishing every interval
        recurring_parent_id: Template id, set only on recurring instances
    """

    id: str = Field(default_factory=new_id)
    name: str = "Untitled Task"
    priority: TaskPriority = "medium"
    status: TaskStatus = "pending"
    estimated_minutes: int = Field(default=60, gt=0)
    start_date: date | None = None
    start_time: time | None = None
    due_date: date | None = None
    due_time: time | None = None
    reminder_minutes: int = Field(default=60, ge=0)
    timer: TimerPreference = Field(default_factory=TimerPreference)
    start_with_break: bool = False
    recurring_days: list[int] = Field(default_factory=list)
    intervals: list[Interval] = Field(default_factory=list)
    progress: Progress = Field(default_factory=Progress)
    use_focus_mode: bool = False
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    ended_early: bool = False
    recurring_parent_id: str | None = None

    @field_validator("recurring_days")
    @classmethod
    def validate_recurring_days(cls, v: list[int]) -> list[int]:
        return _validate_weekdays(v)

    @property
    def is_recurring_instance(self) -> bool:
        return self.recurring_parent_id is not None

    @property
    def is_recurring_template(self) -> bool:
        return bool(self.recurring_days) and not self.is_recurring_instance

    @property
    def current_interval(self) -> Interval | None:
        index = self.progress.current_session
        if 0 <= index < len(self.intervals):
            return self.intervals[index]
        return None

    @property
    def scheduled_start(self) -> datetime | None:
        """Start date combined with start time (midnight when no time is set)."""
        if self.start_date is None:
            return None
        return datetime.combine(self.start_date, self.start_time or time(0, 0))

    @property
    def due_at(self) -> datetime | None:
        if self.due_date is None:
            return None
        return datetime.combine(self.due_date, self.due_time or time(23, 59, 59))

    @property
    def reminder_at(self) -> datetime | None:
        start = self.scheduled_start
        if start is None:
            return None
        return start - timedelta(minutes=self.reminder_minutes)

    @property
    def completion_percentage(self) -> int:
        if self.progress.total_sessions == 0:
            return 0
        return round(self.progress.completed_sessions / self.progress.total_sessions * 100)

    def focus_count(self) -> int:
        return sum(1 for interval in self.intervals if interval.is_focus)

    def first_incomplete_index(self) -> int:
        for index, interval in enumerate(self.intervals):
            if not interval.completed:
                return index
        return len(self.intervals)

    def is_overdue(self, now: datetime | None = None) -> bool:
        due = self.due_at
        if due is None:
            return False
        return (now or datetime.now()) > due


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Focus/break lengths left as None fall back to the settings defaults;
    providing either marks the timer preference as custom.
    """

    name: str = "Untitled Task"
    priority: TaskPriority = "medium"
    estimated_minutes: int = Field(default=60, gt=0)
    start_date: date | None = None
    start_time: time | None = None
    due_date: date | None = None
    due_time: time | None = None
    reminder_minutes: int | None = Field(default=None, ge=0)
    focus_minutes: int | None = Field(default=None, gt=0)
    break_minutes: int | None = Field(default=None, gt=0)
    start_with_break: bool = False
    recurring_days: list[int] = Field(default_factory=list)
    use_focus_mode: bool = False
    tags: list[str] = Field(default_factory=list)

    @field_validator("recurring_days")
    @classmethod
    def validate_recurring_days(cls, v: list[int]) -> list[int]:
        return _validate_weekdays(v)


class TaskUpdate(BaseModel):
    """Model for updating an existing task.

    All fields are optional - only fields explicitly set are applied.
    """

    name: str | None = None
    priority: TaskPriority | None = None
    estimated_minutes: int | None = Field(default=None, gt=0)
    start_date: date | None = None
    start_time: time | None = None
    due_date: date | None = None
    due_time: time | None = None
    reminder_minutes: int | None = Field(default=None, ge=0)
    focus_minutes: int | None = Field(default=None, gt=0)
    break_minutes: int | None = Field(default=None, gt=0)
    use_custom_timer: bool | None = None
    start_with_break: bool | None = None
    recurring_days: list[int] | None = None
    use_focus_mode: bool | None = None
    tags: list[str] | None = None

    @field_validator("recurring_days")
    @classmethod
    def validate_recurring_days(cls, v: list[int] | None) -> list[int] | None:
        if v is None:
            return v
        return _validate_weekdays(v)
