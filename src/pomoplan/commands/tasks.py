"""Task management commands."""

from datetime import date, time
from typing import Any

import typer

from pomoplan.services.config_service import get_config_service
from pomoplan.services.context_manager import get_task_service
from pomoplan.utils.recurrence import resolve_days
from pomoplan.utils.ui.console import get_console
from pomoplan.utils.ui.formatters import (
    format_info,
    format_success,
    format_warning,
    task_panel,
    tasks_table,
)

from .decorators import command_wrapper

app = typer.Typer(help="Task management commands", no_args_is_help=True)
console = get_console()

STATUSES = ("pending", "ongoing", "partial", "completed", "missed")


def parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    if value.lower() == "today":
        return date.today()
    return date.fromisoformat(value)


def parse_time(value: str | None) -> time | None:
    if value is None:
        return None
    return time.fromisoformat(value)


def _timing_from_preset(preset_name: str | None) -> dict[str, int]:
    if preset_name is None:
        return {}
    preset = get_config_service().config.get_timer_preset(preset_name)
    if preset is None:
        raise ValueError(f"Unknown timer preset: {preset_name}")
    return {"focus_minutes": preset.focus_duration, "break_minutes": preset.break_duration}


@app.command("add")
@command_wrapper
def add_task(
    name: str = typer.Argument(..., help="Task name"),
    priority: str = typer.Option("medium", "--priority", "-p", help="high, medium or low"),
    estimate: int = typer.Option(60, "--estimate", "-e", help="Estimated minutes"),
    focus: int | None = typer.Option(None, "--focus", help="Custom focus length"),
    break_: int | None = typer.Option(None, "--break", help="Custom break length"),
    preset: str | None = typer.Option(None, "--preset", help="Timer preset name"),
    start_date: str | None = typer.Option(None, "--date", "-d", help="YYYY-MM-DD or 'today'"),
    start_time: str | None = typer.Option(None, "--time", "-t", help="HH:MM"),
    due_date: str | None = typer.Option(None, "--due", help="Due date YYYY-MM-DD"),
    due_time: str | None = typer.Option(None, "--due-time", help="Due time HH:MM"),
    reminder: int | None = typer.Option(None, "--reminder", help="Minutes before start"),
    start_with_break: bool = typer.Option(False, "--start-with-break", help="Begin with a break"),
    repeat: str | None = typer.Option(
        None, "--repeat", "-r", help="daily, weekdays, weekends or e.g. mon,wed,fri"
    ),
    focus_mode: bool = typer.Option(False, "--focus-mode", help="Always start in focus mode"),
    tags: list[str] = typer.Option([], "--tag", help="Tag (repeatable)"),
) -> None:
    """Create a task and generate its focus/break schedule."""
    fields: dict[str, Any] = _timing_from_preset(preset)
    if focus is not None:
        fields["focus_minutes"] = focus
    if break_ is not None:
        fields["break_minutes"] = break_

    service = get_task_service()
    task = service.add_task(
        name,
        priority=priority.lower(),
        estimated_minutes=estimate,
        start_date=parse_date(start_date),
        start_time=parse_time(start_time),
        due_date=parse_date(due_date),
        due_time=parse_time(due_time),
        reminder_minutes=reminder,
        start_with_break=start_with_break,
        recurring_days=resolve_days(repeat) if repeat else [],
        use_focus_mode=focus_mode,
        tags=tags,
        **fields,
    )
    format_success(f"Created task #{task.id[:8]}: {task.name}")
    console.print(task_panel(task))


@app.command("list")
@command_wrapper
def list_tasks(
    status: str | None = typer.Option(None, "--status", "-s", help="Filter by status"),
    on: str | None = typer.Option(None, "--date", "-d", help="Only tasks for this day"),
) -> None:
    """List tasks."""
    if status is not None and status not in STATUSES:
        raise ValueError(f"Unknown status '{status}'. Choose from: {', '.join(STATUSES)}")

    service = get_task_service()
    day = parse_date(on)
    tasks = service.tasks_for_date(day) if day else service.list_tasks(status)  # type: ignore[arg-type]
    if day and status:
        tasks = [t for t in tasks if t.status == status]

    if not tasks:
        format_info("No tasks found.")
        return
    console.print(tasks_table(tasks))


@app.command("show")
@command_wrapper
def show_task(task_id: str = typer.Argument(..., help="Task ID or prefix")) -> None:
    """Show a task with its interval schedule."""
    service = get_task_service()
    console.print(task_panel(service.get_task(service.resolve_id(task_id))))


@app.command("edit")
@command_wrapper
def edit_task(
    task_id: str = typer.Argument(..., help="Task ID or prefix"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    priority: str | None = typer.Option(None, "--priority", "-p"),
    estimate: int | None = typer.Option(None, "--estimate", "-e"),
    focus: int | None = typer.Option(None, "--focus"),
    break_: int | None = typer.Option(None, "--break"),
    default_timer: bool = typer.Option(False, "--default-timer", help="Use settings lengths"),
    start_date: str | None = typer.Option(None, "--date", "-d"),
    start_time: str | None = typer.Option(None, "--time", "-t"),
    reminder: int | None = typer.Option(None, "--reminder"),
    start_with_break: bool | None = typer.Option(
        None, "--start-with-break/--no-start-with-break"
    ),
    repeat: str | None = typer.Option(None, "--repeat", "-r"),
) -> None:
    """Edit a task. Timing changes keep completed focus sessions."""
    fields: dict[str, Any] = {}
    if name is not None:
        fields["name"] = name
    if priority is not None:
        fields["priority"] = priority.lower()
    if estimate is not None:
        fields["estimated_minutes"] = estimate
    if focus is not None:
        fields["focus_minutes"] = focus
    if break_ is not None:
        fields["break_minutes"] = break_
    if default_timer:
        fields["use_custom_timer"] = False
    if start_date is not None:
        fields["start_date"] = parse_date(start_date)
    if start_time is not None:
        fields["start_time"] = parse_time(start_time)
    if reminder is not None:
        fields["reminder_minutes"] = reminder
    if start_with_break is not None:
        fields["start_with_break"] = start_with_break
    if repeat is not None:
        fields["recurring_days"] = resolve_days(repeat)

    if not fields:
        format_warning("Nothing to change.")
        return

    service = get_task_service()
    task = service.update_task(service.resolve_id(task_id), **fields)
    format_success(f"Updated task #{task.id[:8]}")
    console.print(task_panel(task))


@app.command("delete")
@command_wrapper
def delete_task(
    task_id: str = typer.Argument(..., help="Task ID or prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task (a recurring template also loses its future instances)."""
    service = get_task_service()
    task = service.get_task(service.resolve_id(task_id))
    if not yes and not typer.confirm(f"Delete '{task.name}'?"):
        format_info("Cancelled.")
        return
    removed = service.delete_task(task.id)
    format_success(f"Deleted {len(removed)} task(s)")


@app.command("unmark")
@command_wrapper
def unmark_task(task_id: str = typer.Argument(..., help="Task ID or prefix")) -> None:
    """Undo completion of a task."""
    service = get_task_service()
    task = service.unmark_completed(service.resolve_id(task_id))
    format_success(f"Task #{task.id[:8]} is now {task.status}")


@app.command("missed")
@command_wrapper
def missed_tasks() -> None:
    """Mark overdue tasks missed and list them."""
    service = get_task_service()
    service.check_for_missed_tasks()
    missed = service.list_tasks("missed")
    if not missed:
        format_info("No missed tasks.")
        return
    console.print(tasks_table(missed, title="Missed tasks"))
