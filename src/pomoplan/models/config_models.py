"""Settings models.

User preferences for timer lengths, scheduling policies and notification
filtering, persisted as JSON by the config service.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class NotificationConfig(BaseModel):
    """Which notifications the sink should deliver."""

    enabled: bool = Field(default=True)
    task_start: bool = Field(default=True)
    session_end: bool = Field(default=True)
    break_end: bool = Field(default=True)
    task_complete: bool = Field(default=True)
    reminders: bool = Field(default=True)


class TimerPreset(BaseModel):
    """Named focus/break length pair."""

    name: str
    focus_duration: int = Field(gt=0)
    break_duration: int = Field(gt=0)


def _default_presets() -> list[TimerPreset]:
    return [
        TimerPreset(name="Default", focus_duration=25, break_duration=5),
        TimerPreset(name="Short", focus_duration=15, break_duration=3),
        TimerPreset(name="Long", focus_duration=50, break_duration=10),
    ]


class AppConfig(BaseModel):
    """Main Pomoplan configuration."""

    focus_duration: int = Field(default=25, gt=0, description="Default focus minutes")
    break_duration: int = Field(default=5, gt=0, description="Default break minutes")
    default_reminder_minutes: int = Field(default=60, ge=0)

    auto_start_next_session: bool = Field(
        default=False, description="Start the next interval when one completes"
    )
    focus_mode_on_auto_advance: bool = Field(
        default=False, description="Enter focus mode when auto-advancing"
    )
    recurring_lookahead_days: int = Field(default=7, ge=0)
    tick_poll_seconds: float = Field(default=0.1, gt=0, le=1.0)

    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    timer_presets: list[TimerPreset] = Field(default_factory=_default_presets)

    def get_timer_preset(self, name: str) -> TimerPreset | None:
        """Look up a preset by name, case-insensitively."""
        for preset in self.timer_presets:
            if preset.name.lower() == name.lower():
                return preset
        return None
