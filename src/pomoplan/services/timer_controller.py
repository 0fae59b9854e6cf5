"""Timer controller - keeps the countdown and task state in step.

The controller is the only writer of timer-related task state. It talks to
a ``CountdownProcess`` strictly through its command and event queues:

- every command is sent under one lock and the controller waits for its
  acknowledgement before sending another;
- a listener task consumes events, resolving acknowledgements, forwarding
  ticks to the display and scheduling interval completion handling;
- pausing first asks the countdown for the authoritative remaining time and
  records it as a ``PausedSnapshot`` before touching the task.

Typical use::

    async with TimerController(task_service, notifier, display) as timer:
        await timer.start(task_id)
        ...
        await timer.pause()
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from pomoplan.models import AppConfig, PersistenceError, Task
from pomoplan.models.focus.countdown import CountdownProcess
from pomoplan.models.focus.messages import (
    Complete,
    CountdownCommand,
    CountdownEvent,
    Pause,
    Paused,
    QueryRemaining,
    Remaining,
    Start,
    Stop,
    Stopped,
    Tick,
)
from pomoplan.models.focus.ui import TimerDisplay
from pomoplan.services.notification_service import NotificationSink, notify
from pomoplan.services.task_service import TaskService

logger = logging.getLogger(__name__)

TimerState = Literal["stopped", "running", "paused"]


@dataclass(frozen=True)
class PausedSnapshot:
    """Remaining time of a paused interval.

    Only valid while the task's current interval is still the one at
    ``interval_index`` with id ``interval_id``. Regenerating the interval
    list gives every interval a new id.
    """

    remaining_seconds: int
    interval_index: int
    interval_id: str


@dataclass
class _PendingAck:
    matches: Callable[[CountdownEvent], bool]
    future: asyncio.Future


@dataclass
class _PendingQuery:
    request_id: int
    task_id: str
    interval_index: int
    future: asyncio.Future


class TimerController:
    """Drives the countdown for at most one active task.

    Args:
        task_service: Owner of the task collection and lifecycle
        notifier: Receives focus/break/completion notifications
        display: Timer display; headless by default
        settings: Defaults to the task service's settings
        countdown: Countdown actor; a wall-clock one by default
    """

    def __init__(
        self,
        task_service: TaskService,
        notifier: NotificationSink | None = None,
        display: TimerDisplay | None = None,
        settings: AppConfig | None = None,
        countdown: CountdownProcess | None = None,
    ):
        self.task_service = task_service
        self.lifecycle = task_service.lifecycle
        self.notifier = notifier or task_service.notifier
        self.display = display or TimerDisplay()
        self.settings = settings or task_service.settings
        self.countdown = countdown or CountdownProcess(
            poll_interval=self.settings.tick_poll_seconds
        )

        self.timer_state: TimerState = "stopped"
        self.active_task_id: str | None = None
        self.focus_mode = False
        self.last_error: Exception | None = None

        self._snapshots: dict[str, PausedSnapshot] = {}
        # (task_id, interval_index, duration_seconds) the countdown runs for
        self._running_for: tuple[str, int, int] | None = None
        self._lock = asyncio.Lock()
        self._pending_ack: _PendingAck | None = None
        self._pending_query: _PendingQuery | None = None
        self._request_ids = itertools.count(1)
        # Starts sent vs. starts acknowledged; a Complete belongs to the run
        # whose initial Tick preceded it on the event queue.
        self._runs_started = 0
        self._runs_seen = 0
        self._countdown_task: asyncio.Task | None = None
        self._listener: asyncio.Task | None = None
        self._handlers: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle of the controller itself
    # ------------------------------------------------------------------

    async def __aenter__(self) -> TimerController:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def open(self) -> None:
        """Spawn the countdown actor and the event listener."""
        if self._listener is not None:
            return
        self._countdown_task = asyncio.create_task(self.countdown.run(), name="countdown")
        self._listener = asyncio.create_task(self._listen(), name="countdown-listener")

    async def close(self) -> None:
        """Wait for pending completion handlers, then stop background tasks."""
        if self._handlers:
            await asyncio.gather(*self._handlers, return_exceptions=True)
        tasks = [t for t in (self._listener, self._countdown_task) if t is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._listener = None
        self._countdown_task = None

    async def wait_idle(self) -> None:
        """Wait until scheduled completion handlers have run."""
        while self._handlers:
            await asyncio.gather(*list(self._handlers), return_exceptions=True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def active_task(self) -> Task | None:
        if self.active_task_id is None:
            return None
        return self.task_service.find_task(self.active_task_id)

    def snapshot_for(self, task: Task) -> PausedSnapshot | None:
        """Return the task's snapshot if it still matches its current interval.

        A snapshot for an interval the task has moved past, or for an
        interval list that has since been regenerated, is discarded.
        """
        snapshot = self._snapshots.get(task.id)
        if snapshot is None:
            return None
        interval = task.current_interval
        if (
            snapshot.interval_index != task.progress.current_session
            or interval is None
            or interval.id != snapshot.interval_id
        ):
            logger.debug(
                "Discarding stale snapshot for %s (interval %d, now %d)",
                task.id,
                snapshot.interval_index,
                task.progress.current_session,
            )
            del self._snapshots[task.id]
            return None
        return snapshot

    def check_priority(self) -> Task | None:
        """Suggest a higher-priority pending task; never switches to it."""
        suggestion = self.task_service.higher_priority_than(self.active_task)
        if suggestion is not None:
            notify(self.notifier, "on_priority_conflict", suggestion)
        return suggestion

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def set_active_task(self, task_id: str) -> Task:
        """Make a task active without starting it.

        A different task that is running is paused first.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        async with self._lock:
            task = await self._activate(task_id)
        self._save()
        return task

    async def start(self, task_id: str | None = None) -> Task | None:
        """Start or resume the active task (or ``task_id``, switching to it).

        Resumes from the task's paused snapshot when it still matches the
        current interval, otherwise starts the interval from its full length.

        Returns:
            The running task, or None if there is nothing to start

        Raises:
            TaskNotFoundError: If ``task_id`` does not exist
            PersistenceError: If saving fails (timer and task state are kept)
        """
        async with self._lock:
            if task_id is not None and task_id != self.active_task_id:
                await self._activate(task_id)
            task = self.active_task
            if task is None or task.status == "completed" or task.current_interval is None:
                return None
            if self.timer_state != "running":
                await self._start_current(task)
            self._pause_other_ongoing(task.id)
        self._save()
        self.check_priority()
        return task

    async def resume(self) -> Task | None:
        """Resume the active task."""
        return await self.start()

    async def pause(self) -> bool:
        """Pause the running task, remembering where its countdown was.

        Returns:
            False if nothing was running

        Raises:
            PersistenceError: If saving fails (timer and task state are kept)
        """
        async with self._lock:
            if self.timer_state != "running" or self.active_task is None:
                return False
            await self._pause_active()
        self._save()
        return True

    async def stop(self) -> bool:
        """Stop the countdown, discarding its remaining time.

        A running task becomes partial; its next start begins the current
        interval afresh.
        """
        async with self._lock:
            task = self.active_task
            if self.timer_state == "stopped":
                return False
            await self._stop_countdown()
            if task is not None:
                self._snapshots.pop(task.id, None)
                self.lifecycle.pause(task)
        self._save()
        return True

    async def end_task(self) -> Task | None:
        """End the active task early, completing it with its work so far.

        Raises:
            PersistenceError: If saving fails (the task stays completed)
        """
        async with self._lock:
            task = self.active_task
            if task is None:
                return None
            await self._stop_countdown()
            self._snapshots.pop(task.id, None)
            if self.lifecycle.end_early(task):
                notify(self.notifier, "on_task_completed", task)
            self._clear_active()
        self._save()
        return task

    async def delete_task(self, task_id: str) -> list[str]:
        """Delete a task, stopping the timer first if it belongs to it.

        Returns:
            Ids of every removed task (a template takes its future instances)
        """
        async with self._lock:
            ids = self.task_service.deletion_targets(task_id)
            if self.active_task_id in ids:
                await self._stop_countdown()
                self._clear_active()
            for removed in ids:
                self._snapshots.pop(removed, None)
            return self.task_service.delete_task(task_id)

    async def edit_task(self, task_id: str, **fields: Any) -> Task:
        """Edit a task and bring the running countdown in line with it.

        Raises:
            ConfigurationError: If any field fails validation
            TaskNotFoundError: If the task does not exist
        """
        async with self._lock:
            try:
                task = self.task_service.update_task(task_id, **fields)
            finally:
                await self._sync_running_interval()
        return task

    async def handle_task_edited(self, task_id: str | None = None) -> bool:
        """Re-check the running countdown after an edit made elsewhere.

        Returns:
            True if the countdown was restarted or stopped
        """
        async with self._lock:
            if task_id is not None and task_id != self.active_task_id:
                return False
            return await self._sync_running_interval()

    def enter_focus_mode(self) -> None:
        self._set_focus_mode(True)

    def exit_focus_mode(self) -> None:
        self._set_focus_mode(False)

    # ------------------------------------------------------------------
    # Internals (callers hold the lock)
    # ------------------------------------------------------------------

    async def _activate(self, task_id: str) -> Task:
        task = self.task_service.get_task(task_id)
        if self.active_task_id != task_id:
            if self.timer_state == "running":
                await self._pause_active()
            if self.timer_state == "paused":
                # The snapshot keeps the old task's place
                await self._stop_countdown()
            self.active_task_id = task_id
            logger.info("Active task is now %s", task_id)
        self.display.update_task_info(task)
        self._update_controls()
        return task

    async def _start_current(self, task: Task, *, auto: bool = False) -> None:
        index = task.progress.current_session
        interval = task.current_interval
        if interval is None:
            return

        snapshot = self.snapshot_for(task)
        if snapshot is not None:
            del self._snapshots[task.id]
            seconds = snapshot.remaining_seconds
            logger.debug("Resuming %s interval %d at %ds", task.id, index, seconds)
        else:
            seconds = interval.duration_seconds

        await self._start_run(seconds)
        self._running_for = (task.id, index, interval.duration_seconds)
        self.timer_state = "running"
        self.lifecycle.start(task)

        if interval.is_focus:
            notify(self.notifier, "on_focus_start", task, self._session_number(task, index))
        else:
            notify(self.notifier, "on_break_start", task)

        if task.use_focus_mode or (auto and self.settings.focus_mode_on_auto_advance):
            self._set_focus_mode(True)
        self.display.update_task_info(task)
        self._update_controls()

    async def _pause_active(self) -> None:
        task = self.active_task
        if task is None:
            return
        index = task.progress.current_session
        interval = task.current_interval

        remaining = await self._query_remaining(task.id, index)
        if remaining is not None and interval is not None:
            self._snapshots[task.id] = PausedSnapshot(remaining, index, interval.id)

        await self._command(Pause(), lambda e: isinstance(e, Paused))
        self._running_for = None
        self.timer_state = "paused"
        self.lifecycle.pause(task)
        self._update_controls()
        logger.info("Paused %s with %s seconds left", task.id, remaining)

    async def _start_run(self, seconds: int) -> None:
        self._runs_started += 1
        await self._command(Start(seconds), lambda e: isinstance(e, Tick) and e.initial)

    async def _stop_countdown(self) -> None:
        self._cancel_pending_query()
        if self.timer_state == "stopped":
            return
        await self._command(Stop(), lambda e: isinstance(e, Stopped))
        self._running_for = None
        self.timer_state = "stopped"
        self._set_focus_mode(False)
        self._update_controls()

    async def _sync_running_interval(self) -> bool:
        task = self.active_task
        if task is None or self.timer_state != "running" or self._running_for is None:
            return False

        if task.status == "completed":
            await self._stop_countdown()
            notify(self.notifier, "on_task_completed", task)
            self._clear_active()
            self._save()
            return True

        _, index, duration = self._running_for
        interval = task.current_interval
        if interval is None:
            return False
        if index == task.progress.current_session and duration == interval.duration_seconds:
            return False

        logger.info("Interval changed under %s, restarting countdown", task.id)
        self._snapshots.pop(task.id, None)
        await self._start_run(interval.duration_seconds)
        self._running_for = (task.id, task.progress.current_session, interval.duration_seconds)
        if interval.started_at is None:
            self.lifecycle.start(task)
        self.display.update_task_info(task)
        self._save()
        return True

    async def _query_remaining(self, task_id: str, interval_index: int) -> int | None:
        """Ask the countdown for the remaining time of the running interval.

        Returns:
            Seconds left, or None if the answer arrived for an interval that
            is no longer current
        """
        request_id = next(self._request_ids)
        future = asyncio.get_running_loop().create_future()
        self._pending_query = _PendingQuery(request_id, task_id, interval_index, future)
        self._send(QueryRemaining(request_id))
        return await future

    async def _command(
        self, command: CountdownCommand, matches: Callable[[CountdownEvent], bool]
    ) -> CountdownEvent:
        future = asyncio.get_running_loop().create_future()
        self._pending_ack = _PendingAck(matches, future)
        self._send(command)
        return await future

    def _send(self, command: CountdownCommand) -> None:
        if self._listener is None:
            raise RuntimeError("TimerController is not open; use 'async with'")
        self.countdown.send(command)

    def _cancel_pending_query(self) -> None:
        pending, self._pending_query = self._pending_query, None
        if pending is not None and not pending.future.done():
            pending.future.set_result(None)

    def _clear_active(self) -> None:
        self.active_task_id = None
        self._set_focus_mode(False)
        self.display.update_task_info(None)
        self._update_controls()

    def _pause_other_ongoing(self, task_id: str) -> None:
        for other in self.task_service.list_tasks("ongoing"):
            if other.id != task_id:
                self.lifecycle.pause(other)

    def _set_focus_mode(self, enabled: bool) -> None:
        if self.focus_mode != enabled:
            self.focus_mode = enabled
            self.display.set_focus_mode(enabled)

    def _update_controls(self) -> None:
        self.display.update_controls(self.timer_state, self.active_task_id is not None)

    @staticmethod
    def _session_number(task: Task, index: int) -> int:
        """1-based ordinal of the focus interval at ``index``."""
        return sum(1 for interval in task.intervals[: index + 1] if interval.is_focus)

    def _save(self) -> None:
        self.task_service.save()

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    async def _listen(self) -> None:
        while True:
            event = await self.countdown.events.get()
            self._dispatch(event)

    def _dispatch(self, event: CountdownEvent) -> None:
        if isinstance(event, Tick):
            if event.initial:
                self._runs_seen += 1
            self.display.update_display(event.remaining_seconds, event.progress_percent)
        elif isinstance(event, Remaining):
            self._resolve_query(event)
            return
        elif isinstance(event, Complete):
            self._schedule(self._handle_complete(self._runs_seen))

        pending = self._pending_ack
        if pending is not None and pending.matches(event):
            self._pending_ack = None
            if not pending.future.done():
                pending.future.set_result(event)

    def _resolve_query(self, event: Remaining) -> None:
        pending = self._pending_query
        if pending is None or pending.request_id != event.request_id:
            logger.debug("Ignoring late remaining-time answer %s", event.request_id)
            return
        self._pending_query = None
        task = self.active_task
        if (
            task is None
            or task.id != pending.task_id
            or task.progress.current_session != pending.interval_index
        ):
            pending.future.set_result(None)
        else:
            pending.future.set_result(event.remaining_seconds)

    def _schedule(self, coro) -> None:
        handler = asyncio.create_task(coro)
        self._handlers.add(handler)
        handler.add_done_callback(self._handlers.discard)

    async def _handle_complete(self, run: int) -> None:
        """Advance the task whose interval just ran out.

        ``run`` numbers the countdown run that completed. If another run has
        been started since, or the run was paused or stopped, nothing happens.
        """
        async with self._lock:
            if run != self._runs_started or self._running_for is None:
                logger.debug("Ignoring completion of countdown run %d", run)
                return
            task_id, index, _ = self._running_for
            task = self.task_service.find_task(task_id)
            self._running_for = None
            self.timer_state = "stopped"
            if task is None or task.progress.current_session != index:
                self._update_controls()
                return

            interval = task.current_interval
            if interval is not None and interval.is_focus:
                notify(self.notifier, "on_focus_end", task, self._session_number(task, index))
            else:
                notify(self.notifier, "on_break_end", task)

            self.lifecycle.complete_current_interval(task)
            self._snapshots.pop(task.id, None)

            if task.status == "completed":
                notify(self.notifier, "on_task_completed", task)
                self._clear_active()
            elif self.settings.auto_start_next_session:
                await self._start_current(task, auto=True)
            else:
                # Waiting for the user to start the next interval
                self.lifecycle.pause(task)
                self._set_focus_mode(False)
                self.display.update_task_info(task)
                self._update_controls()

            try:
                self._save()
            except PersistenceError as e:
                logger.error("Failed to save after completing %s: %s", task.id, e)
                self.last_error = e
