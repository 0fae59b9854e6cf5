"""Output formatters for the Pomoplan CLI."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from pomoplan.models import Task
from pomoplan.utils.recurrence import describe_days
from pomoplan.utils.ui.console import get_console
from pomoplan.utils.uuid_utils import shorten_uuid

console = get_console()

STATUS_STYLES = {
    "pending": "white",
    "ongoing": "cyan",
    "partial": "yellow",
    "completed": "green",
    "missed": "red",
}

PRIORITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "dim"}


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def _schedule(task: Task) -> str:
    start = task.scheduled_start
    if start is None:
        return "-"
    if task.start_time is None:
        return start.strftime("%Y-%m-%d")
    return start.strftime("%Y-%m-%d %H:%M")


def tasks_table(tasks: list[Task], title: str = "Tasks") -> Table:
    """Build a table with one row per task."""
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name")
    table.add_column("Priority")
    table.add_column("Status")
    table.add_column("Start")
    table.add_column("Sessions", justify="right")

    for task in tasks:
        name = task.name
        if task.is_recurring_template:
            name += f" [dim](every {describe_days(task.recurring_days)})[/dim]"
        table.add_row(
            shorten_uuid(task.id),
            name,
            f"[{PRIORITY_STYLES.get(task.priority, '')}]{task.priority}[/]",
            f"[{STATUS_STYLES.get(task.status, '')}]{task.status}[/]",
            _schedule(task),
            f"{task.progress.completed_sessions}/{task.progress.total_sessions}",
        )
    return table


def task_panel(task: Task) -> Panel:
    """Detailed view of one task, including its interval schedule."""
    progress = task.progress
    lines = [
        f"[bold]{task.name}[/bold]  [dim]#{task.id}[/dim]",
        f"Priority: [{PRIORITY_STYLES.get(task.priority, '')}]{task.priority}[/]",
        f"Status: [{STATUS_STYLES.get(task.status, '')}]{task.status}[/]"
        + (" (ended early)" if task.ended_early else ""),
        f"Start: {_schedule(task)}",
        f"Estimated: {task.estimated_minutes} min "
        f"({task.timer.focus_minutes}/{task.timer.break_minutes}"
        f"{', custom' if task.timer.use_custom else ''})",
        f"Progress: {progress.completed_sessions}/{progress.total_sessions} sessions, "
        f"{progress.time_spent:.0f} min spent ({task.completion_percentage}%)",
    ]
    if task.recurring_days:
        lines.append(f"Repeats: {describe_days(task.recurring_days)}")
    if task.recurring_parent_id:
        lines.append(f"Instance of: #{shorten_uuid(task.recurring_parent_id)}")
    if task.tags:
        lines.append("Tags: " + ", ".join(task.tags))

    schedule = []
    for index, interval in enumerate(task.intervals):
        label = "F" if interval.is_focus else "B"
        cell = f"{label}{interval.duration}"
        if interval.skipped:
            cell = f"[dim strike]{cell}[/]"
        elif interval.completed:
            cell = f"[green]{cell}[/]"
        elif index == progress.current_session:
            cell = f"[bold cyan]>{cell}[/]"
        schedule.append(cell)
    lines.append("Intervals: " + " ".join(schedule))

    return Panel("\n".join(lines), border_style=STATUS_STYLES.get(task.status, "white"))
