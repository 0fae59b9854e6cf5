"""Countdown process.

An isolated asyncio actor that counts down a duration against its own clock.
It knows nothing about tasks: commands arrive on ``commands`` and events are
published on ``events``, both ordered queues.

Remaining time is always recomputed from the start timestamp rather than
decremented, so scheduler jitter never accumulates::

    remaining = max(0, duration - floor(now - start))
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable

from pomoplan.models.focus.messages import (
    Complete,
    CountdownCommand,
    CountdownEvent,
    Pause,
    Paused,
    QueryRemaining,
    Remaining,
    Resume,
    Resumed,
    Start,
    Stop,
    Stopped,
    Tick,
)

logger = logging.getLogger(__name__)


class CountdownProcess:
    """Wall-clock countdown driven by commands.

    Every command produces exactly one acknowledgement event, even when it
    has no effect (e.g. ``Pause`` while already paused): ``Start`` -> initial
    ``Tick``, ``Pause`` -> ``Paused``, ``Resume`` -> ``Resumed``,
    ``Stop`` -> ``Stopped``, ``QueryRemaining`` -> ``Remaining``.

    Args:
        clock: Seconds since the epoch, defaults to ``time.time``
        poll_interval: Seconds between internal checks while running
        tick_interval: Minimum seconds between periodic ``Tick`` events
    """

    def __init__(
        self,
        clock: Callable[[], float] | None = None,
        poll_interval: float = 0.1,
        tick_interval: float = 1.0,
    ):
        self.clock = clock or time.time
        self.poll_interval = poll_interval
        self.tick_interval = tick_interval

        self.commands: asyncio.Queue[CountdownCommand] = asyncio.Queue()
        self.events: asyncio.Queue[CountdownEvent] = asyncio.Queue()

        self._duration = 0
        self._remaining = 0
        self._start_time: float | None = None
        self._paused_at: float | None = None
        self._last_tick: float | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused_at is not None

    @property
    def remaining_seconds(self) -> int:
        if self._running:
            return self._compute_remaining(self.clock())
        return self._remaining

    def send(self, command: CountdownCommand) -> None:
        """Queue a command for the actor."""
        self.commands.put_nowait(command)

    async def run(self) -> None:
        """Process commands until cancelled.

        While idle the loop blocks on the command queue; while counting it
        drains pending commands and re-checks the clock every poll interval.
        """
        while True:
            if self._running:
                while not self.commands.empty():
                    self._receive(self.commands.get_nowait())
                if self._running:
                    self.check()
                await asyncio.sleep(self.poll_interval)
            else:
                self._receive(await self.commands.get())

    def _receive(self, command: object) -> None:
        try:
            self.handle(command)
        except TypeError as exc:
            logger.error("Dropping countdown command: %s", exc)

    def handle(self, command: CountdownCommand) -> None:
        """Apply one command and emit its acknowledgement.

        Raises:
            TypeError: If ``command`` is not a countdown command
        """
        if not isinstance(command, CountdownCommand):
            raise TypeError(f"Unknown countdown command: {command!r}")
        logger.debug("countdown <- %s", command.as_message())
        now = self.clock()

        if isinstance(command, Start):
            self._reset()
            self._duration = max(0, int(command.duration_seconds))
            self._remaining = self._duration
            self._start_time = now
            self._last_tick = now
            self._running = True
            percent = 100.0 if self._duration else 0.0
            self._emit(Tick(self._remaining, percent, initial=True))
            if self._duration == 0:
                self._finish()

        elif isinstance(command, Pause):
            if self._running:
                self._remaining = self._compute_remaining(now)
                self._paused_at = now
                self._running = False
            self._emit(Paused(self._remaining))

        elif isinstance(command, Resume):
            if self._paused_at is not None and self._start_time is not None:
                self._start_time += now - self._paused_at
                self._paused_at = None
                self._last_tick = now
                self._running = True
            self._emit(Resumed(self._remaining))

        elif isinstance(command, Stop):
            self._reset()
            self._emit(Stopped())

        elif isinstance(command, QueryRemaining):
            if self._running:
                self._remaining = self._compute_remaining(now)
            self._emit(Remaining(self._remaining, command.request_id))

    def check(self) -> None:
        """Recompute remaining time, emitting a tick and completion as due."""
        if not self._running:
            return

        now = self.clock()
        self._remaining = self._compute_remaining(now)

        if self._last_tick is None or now - self._last_tick >= self.tick_interval:
            self._last_tick = now
            self._emit(Tick(self._remaining, self._progress_percent()))

        if self._remaining == 0:
            self._finish()

    def _compute_remaining(self, now: float) -> int:
        if self._start_time is None:
            return self._remaining
        elapsed = math.floor(now - self._start_time)
        return max(0, self._duration - elapsed)

    def _progress_percent(self) -> float:
        if not self._duration:
            return 0.0
        return self._remaining / self._duration * 100

    def _finish(self) -> None:
        duration = self._duration
        self._running = False
        self._paused_at = None
        self._remaining = 0
        self._emit(Complete(duration))

    def _reset(self) -> None:
        self._duration = 0
        self._remaining = 0
        self._start_time = None
        self._paused_at = None
        self._last_tick = None
        self._running = False

    def _emit(self, event: CountdownEvent) -> None:
        logger.debug("countdown -> %s", event.as_message())
        self.events.put_nowait(event)
