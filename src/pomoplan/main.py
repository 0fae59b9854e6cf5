"""Main entry point for the Pomoplan CLI."""

from datetime import datetime

import typer

from pomoplan import __version__
from pomoplan.commands import config, focus, recurring, tasks
from pomoplan.commands.decorators import command_wrapper
from pomoplan.services.context_manager import get_task_service
from pomoplan.services.priority_service import next_due_task
from pomoplan.utils.logger import log_file_path
from pomoplan.utils.ui.console import get_console
from pomoplan.utils.ui.formatters import format_info, format_warning, task_panel

app = typer.Typer(
    name="pomoplan",
    help="Plan tasks as focus sessions and run them with a Pomodoro timer",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(focus.app, name="focus", help="Focus sessions with the Pomodoro timer")
app.add_typer(recurring.app, name="recurring", help="Recurring task templates")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Pomoplan[/bold] version [cyan]{__version__}[/cyan]")
    console.print(f"[dim]Log file: {log_file_path()}[/dim]")


@app.command("next")
@command_wrapper
def next_task() -> None:
    """Suggest what to work on next."""
    service = get_task_service()

    current = next(iter(service.active_tasks()), None)
    if current is not None:
        console.print(f"In progress: [bold]{current.name}[/bold] ({current.priority})")
        suggestion = service.higher_priority_than(current)
        if suggestion is not None:
            format_warning(
                f"'{suggestion.name}' has higher priority ({suggestion.priority}). "
                "Consider switching."
            )
        return

    due = next_due_task(service.pending_tasks(), datetime.now())
    if due is None:
        pending = service.pending_tasks()
        if not pending:
            format_info("Nothing scheduled. Add a task with 'pomoplan tasks add'.")
            return
        due = pending[0]
    console.print(task_panel(due))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
