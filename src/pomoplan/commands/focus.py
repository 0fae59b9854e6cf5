"""Focus session commands.

``focus start`` runs the timer controller in the foreground until the
current interval ends (or, with auto-advance, until the task is done).
Ctrl+C pauses through the controller so the remaining time is kept for the
rest of this run and the task is saved as partial.
"""

import asyncio
import contextlib
import signal

import typer
from rich.live import Live

from pomoplan.models.focus.ui import RichTimerDisplay
from pomoplan.services.context_manager import get_task_service
from pomoplan.services.reminder_service import ReminderService
from pomoplan.services.timer_controller import TimerController
from pomoplan.utils.ui.console import get_console
from pomoplan.utils.ui.formatters import (
    format_info,
    format_success,
    format_warning,
    task_panel,
    tasks_table,
)

from .decorators import command_wrapper

app = typer.Typer(help="Focus sessions with the Pomodoro timer", no_args_is_help=True)
console = get_console()

POLL_SECONDS = 0.25


def _install_interrupt(event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    # Not available on every platform; the default KeyboardInterrupt applies there
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, event.set)


def _remove_interrupt() -> None:
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.remove_signal_handler(signal.SIGINT)


async def run_session(
    timer: TimerController,
    display: RichTimerDisplay,
    reminders: ReminderService,
    interrupted: asyncio.Event,
) -> None:
    """Keep the live display up while the timer runs."""
    with Live(display.render(), console=console, refresh_per_second=4) as live:
        display.attach(live)
        try:
            while not interrupted.is_set():
                await asyncio.sleep(POLL_SECONDS)
                await timer.wait_idle()
                reminders.check()
                if timer.active_task_id is None or timer.timer_state != "running":
                    break
        finally:
            display.attach(None)


@app.command("start")
@command_wrapper
async def start_focus(
    task_id: str = typer.Argument(..., help="Task ID or prefix"),
    auto: bool | None = typer.Option(
        None, "--auto/--no-auto", help="Override auto-start of the next interval"
    ),
    focus_mode: bool = typer.Option(False, "--focus-mode", help="Show only the clock"),
) -> None:
    """Start or resume a task's current interval."""
    service = get_task_service()
    settings = service.settings
    if auto is not None:
        settings = settings.model_copy(update={"auto_start_next_session": auto})

    display = RichTimerDisplay(console)
    reminders = ReminderService(service)
    interrupted = asyncio.Event()

    async with TimerController(service, display=display, settings=settings) as timer:
        task = await timer.start(service.resolve_id(task_id))
        if task is None:
            format_warning("Nothing left to run for this task.")
            return
        if focus_mode:
            timer.enter_focus_mode()

        _install_interrupt(interrupted)
        try:
            await run_session(timer, display, reminders, interrupted)
        finally:
            _remove_interrupt()

        if interrupted.is_set():
            await timer.pause()
            format_info(f"Paused '{task.name}'.")
        elif task.status == "completed":
            format_success(f"Completed '{task.name}'!")
        else:
            format_info(
                f"Interval done. Run 'pomoplan focus start {task.id[:8]}' for the next one."
            )

    if timer.last_error is not None:
        raise timer.last_error
    console.print(task_panel(task))


@app.command("end")
@command_wrapper
async def end_focus(task_id: str = typer.Argument(..., help="Task ID or prefix")) -> None:
    """End a task early, keeping the work done so far."""
    service = get_task_service()
    async with TimerController(service) as timer:
        await timer.set_active_task(service.resolve_id(task_id))
        task = await timer.end_task()
    if task is not None:
        format_success(f"Ended '{task.name}' early.")
        console.print(task_panel(task))


@app.command("status")
@command_wrapper
def focus_status() -> None:
    """Show tasks that are in progress."""
    service = get_task_service()
    active = service.active_tasks()
    if not active:
        format_info("No task in progress.")
        return
    console.print(tasks_table(active, title="In progress"))
