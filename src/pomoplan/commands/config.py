"""Configuration commands."""

import json

import typer

from pomoplan.services.config_service import get_config_service
from pomoplan.utils.ui.console import get_console
from pomoplan.utils.ui.formatters import format_success

from .decorators import command_wrapper

app = typer.Typer(help="Configuration management", no_args_is_help=True)
console = get_console()


@app.command("show")
@command_wrapper
def show_config() -> None:
    """Show the current settings."""
    config = get_config_service().config
    console.print_json(config.model_dump_json())


@app.command("get")
@command_wrapper
def get_setting(key: str = typer.Argument(..., help="Dotted key, e.g. notifications.reminders")) -> None:
    """Show one setting."""
    value = get_config_service().get(key)
    if hasattr(value, "model_dump"):
        value = value.model_dump()
    console.print(json.dumps(value, default=str))


@app.command("set")
@command_wrapper
def set_setting(
    key: str = typer.Argument(..., help="Dotted key"),
    value: str = typer.Argument(..., help="New value (JSON or plain text)"),
) -> None:
    """Change one setting."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    get_config_service().set(key, parsed)
    format_success(f"{key} = {value}")


@app.command("preset")
@command_wrapper
def use_preset(name: str = typer.Argument(..., help="Preset name, e.g. Short")) -> None:
    """Make a timer preset the default focus/break lengths."""
    preset = get_config_service().apply_preset(name)
    format_success(
        f"Default timer is now {preset.focus_duration}/{preset.break_duration} ({preset.name})"
    )
