"""Timer display capability and its Rich rendering."""

from __future__ import annotations

from rich.align import Align
from rich.console import Console, Group, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.text import Text

from pomoplan.models.task import Task


class TimerDisplay:
    """What the timer controller may ask of a display.

    The base class is the headless display: it records nothing and draws
    nothing, so the controller can always call it unconditionally.
    """

    def update_display(self, remaining_seconds: int, progress_percent: float) -> None:
        pass

    def update_controls(self, timer_state: str, has_active_task: bool) -> None:
        pass

    def update_task_info(self, task: Task | None) -> None:
        pass

    def set_focus_mode(self, enabled: bool) -> None:
        pass


def format_remaining(seconds: int) -> str:
    """Render seconds as MM:SS (minutes may exceed 59)."""
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class RichTimerDisplay(TimerDisplay):
    """Manages the terminal timer display.

    Call ``attach`` with a running ``rich.live.Live`` to have every update
    redrawn; without one the display only tracks state, which ``render``
    turns into a renderable on demand.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.live: Live | None = None
        self.remaining_seconds = 0
        self.progress_percent = 0.0
        self.timer_state = "stopped"
        self.has_active_task = False
        self.task: Task | None = None
        self.focus_mode = False

    def attach(self, live: Live | None) -> None:
        self.live = live
        self._refresh()

    def update_display(self, remaining_seconds: int, progress_percent: float) -> None:
        self.remaining_seconds = remaining_seconds
        self.progress_percent = progress_percent
        self._refresh()

    def update_controls(self, timer_state: str, has_active_task: bool) -> None:
        self.timer_state = timer_state
        self.has_active_task = has_active_task
        self._refresh()

    def update_task_info(self, task: Task | None) -> None:
        self.task = task
        self._refresh()

    def set_focus_mode(self, enabled: bool) -> None:
        self.focus_mode = enabled
        self._refresh()

    def _refresh(self) -> None:
        if self.live is not None:
            self.live.update(self.render())

    def render(self) -> RenderableType:
        """Create the timer layout with all components."""
        if self.focus_mode:
            # Focus mode hides everything but the clock
            return Align.center(self._timer_text(), vertical="middle")

        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=3),
        )

        if self.timer_state == "paused":
            title, color = "⏸  PAUSED", "yellow"
        elif self.timer_state == "running":
            interval = self.task.current_interval if self.task else None
            if interval is not None and not interval.is_focus:
                title, color = "☕ Break", "blue"
            else:
                title, color = "🍅 Focus", "cyan"
        else:
            title, color = "Pomoplan", "white"

        header = Text(title, style=f"bold {color}", justify="center")
        layout["header"].update(Align.center(header, vertical="middle"))
        layout["body"].update(Align.center(self._body(), vertical="middle"))
        layout["footer"].update(Align.center(self._footer(), vertical="middle"))
        return layout

    def _timer_text(self) -> Text:
        if self.timer_state == "paused":
            color = "yellow"
        elif self.remaining_seconds < 60:
            color = "red"
        elif self.remaining_seconds < 300:
            color = "yellow"
        else:
            color = "cyan"
        return Text(
            format_remaining(self.remaining_seconds),
            style=f"bold {color}",
            justify="center",
        )

    def _body(self) -> Group:
        components: list[RenderableType] = []

        if self.task is not None:
            task_text = Text(self.task.name[:50], style="bold white", justify="center")
            task_text.append(f" (#{self.task.id[:8]})", style="dim")
            components.append(task_text)
            progress = self.task.progress
            components.append(
                Text(
                    f"Session {min(progress.completed_sessions + 1, progress.total_sessions)}"
                    f" of {progress.total_sessions}",
                    style="dim",
                    justify="center",
                )
            )
            components.append(Text(""))

        components.append(self._timer_text())
        components.append(Text(""))

        # Bar fills as time elapses
        elapsed_pct = max(0, min(100, int(100 - self.progress_percent)))
        bar_width = 40
        filled = int(bar_width * elapsed_pct / 100)
        bar = "▓" * filled + "░" * (bar_width - filled)
        components.append(Text(f"{bar}  {elapsed_pct}%", style="dim", justify="center"))

        return Group(*components)

    def _footer(self) -> Text:
        if not self.has_active_task:
            hints = "No active task"
        elif self.timer_state == "running":
            hints = "Ctrl+C to pause"
        else:
            hints = "Waiting to start the next interval"
        return Text(hints, style="dim", justify="center")
