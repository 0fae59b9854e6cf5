"""Shared test fixtures and configuration.

Provides fake clocks, an in-memory task service and helpers for driving the
timer controller without real waiting.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

from pomoplan.adapters.memory import InMemoryTaskRepository
from pomoplan.models.config_models import AppConfig
from pomoplan.models.focus.countdown import CountdownProcess
from pomoplan.services.notification_service import NotificationSink
from pomoplan.services.task_service import TaskService

# Wednesday
NOW = datetime(2025, 3, 5, 9, 0, 0)


# ---------------------------------------------------------------------------
# Clocks
# ---------------------------------------------------------------------------


class FakeClock:
    """Epoch-seconds clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDateTimeClock:
    """Local datetime clock that only moves when told to."""

    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingCountdown(CountdownProcess):
    """Countdown that remembers every command it was sent."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sent = []

    def send(self, command) -> None:
        self.sent.append(command)
        super().send(command)


async def settle(timer=None, rounds: int = 20) -> None:
    """Let the countdown loop, the listener and completion handlers run."""
    for _ in range(rounds):
        await asyncio.sleep(0.002)
    if timer is not None:
        await timer.wait_idle()
        for _ in range(rounds):
            await asyncio.sleep(0.002)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> AppConfig:
    return AppConfig()


@pytest.fixture()
def repo(settings) -> InMemoryTaskRepository:
    return InMemoryTaskRepository(settings=settings)


@pytest.fixture()
def dt_clock() -> FakeDateTimeClock:
    return FakeDateTimeClock()


@pytest.fixture()
def notifier() -> MagicMock:
    return MagicMock(spec=NotificationSink)


@pytest.fixture()
def service(repo, settings, notifier, dt_clock) -> TaskService:
    svc = TaskService(repo, settings=settings, notifier=notifier, clock=dt_clock)
    svc.load()
    return svc


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def countdown(clock) -> RecordingCountdown:
    return RecordingCountdown(clock=clock, poll_interval=0.001)


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from pomoplan.services.config_service import ConfigService, get_config_service

    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    with patch("pomoplan.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("pomoplan.services.config_service.user_data_dir", return_value=tmpdir):
            yield ConfigService()
    get_config_service.cache_clear()


@pytest.fixture()
def cli_service(service):
    """Point every command module at the in-memory task service."""
    targets = [
        "pomoplan.commands.tasks.get_task_service",
        "pomoplan.commands.focus.get_task_service",
        "pomoplan.commands.recurring.get_task_service",
        "pomoplan.main.get_task_service",
    ]
    patchers = [patch(target, return_value=service) for target in targets]
    for p in patchers:
        p.start()
    yield service
    for p in reversed(patchers):
        p.stop()


@pytest.fixture(autouse=True)
def isolate_log_dir(tmp_path):
    """Keep the CLI's log file out of the real user log directory."""
    import pomoplan.utils.logger as logger_mod

    original = logger_mod._logger
    logger_mod._logger = None
    with patch("pomoplan.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    app_logger = logging.getLogger("pomoplan")
    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()
    app_logger.propagate = True
    logger_mod._logger = original
