"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer

from pomoplan.models.exceptions import (
    ConfigurationError,
    PersistenceError,
    PomoplanError,
    TaskNotFoundError,
)
from pomoplan.utils import exit_codes
from pomoplan.utils.logger import get_logger
from pomoplan.utils.ui.formatters import format_error


def exit_code_for(error: Exception) -> int:
    """Map an exception raised by a command to a process exit code."""
    if isinstance(error, TaskNotFoundError):
        return exit_codes.ERROR_NOT_FOUND
    if isinstance(error, (ConfigurationError, ValueError)):
        return exit_codes.ERROR_INVALID_ARGS
    if isinstance(error, PersistenceError):
        return exit_codes.ERROR_PERSISTENCE
    return exit_codes.ERROR_GENERAL


def command_wrapper(func: Callable) -> Callable:
    """Decorator to wrap command functions with common functionality.

    Logs start, completion and failure, runs coroutine commands with
    ``asyncio.run`` and turns errors into a red message plus exit code.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if inspect.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except (PomoplanError, ValueError) as e:
            elapsed = time.monotonic() - start
            logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
            format_error(str(e))
            raise typer.Exit(code=exit_code_for(e)) from e

        except typer.Exit:
            # Re-raise Typer's own exits (like --help or explicit Exit(0))
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
