"""Recurring task commands."""

import typer

from pomoplan.services.context_manager import get_task_service
from pomoplan.utils.recurrence import describe_days
from pomoplan.utils.ui.console import get_console
from pomoplan.utils.ui.formatters import format_info, format_success, tasks_table

from .decorators import command_wrapper

app = typer.Typer(help="Recurring task templates", no_args_is_help=True)
console = get_console()


@app.command("list")
@command_wrapper
def list_templates() -> None:
    """List recurring templates."""
    service = get_task_service()
    templates = service.recurring.templates()
    if not templates:
        format_info("No recurring tasks.")
        return
    console.print(tasks_table(templates, title="Recurring templates"))


@app.command("sync")
@command_wrapper
def sync_instances() -> None:
    """Create missing instances for the lookahead window."""
    service = get_task_service()
    created = service.recurring.schedule_all()
    format_success(f"Created {len(created)} instance(s)")


@app.command("next")
@command_wrapper
def next_instance(task_id: str = typer.Argument(..., help="Template ID or prefix")) -> None:
    """Show the next upcoming instance of a template."""
    service = get_task_service()
    template = service.get_task(service.resolve_id(task_id))
    instance = service.recurring.next_instance(template.id)
    if instance is None:
        format_info(
            f"No upcoming instance of '{template.name}' "
            f"(repeats {describe_days(template.recurring_days)})."
        )
        return
    console.print(f"Next: [bold]{instance.name}[/bold] on {instance.start_date.isoformat()}")


@app.command("clear")
@command_wrapper
def clear_instances(task_id: str = typer.Argument(..., help="Template ID or prefix")) -> None:
    """Delete a template's future instances, keeping the template."""
    service = get_task_service()
    removed = service.recurring.delete_future_instances(service.resolve_id(task_id))
    format_success(f"Deleted {len(removed)} future instance(s)")
