"""Typed messages exchanged with the countdown process.

Commands flow controller -> countdown, events flow countdown -> controller,
each over its own ordered queue. ``as_message`` renders the wire form used
in logs, e.g. ``{"start": 1500}`` or ``{"tick": 1499, "progress": 99.9}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# Commands


@dataclass(frozen=True)
class Start:
    duration_seconds: int

    def as_message(self) -> dict[str, Any]:
        return {"start": self.duration_seconds}


@dataclass(frozen=True)
class Pause:
    def as_message(self) -> dict[str, Any]:
        return {"pause": None}


@dataclass(frozen=True)
class Resume:
    def as_message(self) -> dict[str, Any]:
        return {"resume": None}


@dataclass(frozen=True)
class Stop:
    def as_message(self) -> dict[str, Any]:
        return {"stop": None}


@dataclass(frozen=True)
class QueryRemaining:
    request_id: int

    def as_message(self) -> dict[str, Any]:
        return {"queryRemaining": None, "request_id": self.request_id}


CountdownCommand = Start | Pause | Resume | Stop | QueryRemaining


# Events


@dataclass(frozen=True)
class Tick:
    """Periodic remaining-time report.

    ``initial`` marks the tick emitted in direct response to ``Start``.
    """

    remaining_seconds: int
    progress_percent: float
    initial: bool = False

    def as_message(self) -> dict[str, Any]:
        return {"tick": self.remaining_seconds, "progress": self.progress_percent}


@dataclass(frozen=True)
class Paused:
    remaining_seconds: int

    def as_message(self) -> dict[str, Any]:
        return {"paused": self.remaining_seconds}


@dataclass(frozen=True)
class Resumed:
    remaining_seconds: int

    def as_message(self) -> dict[str, Any]:
        return {"resumed": self.remaining_seconds}


@dataclass(frozen=True)
class Stopped:
    def as_message(self) -> dict[str, Any]:
        return {"stopped": None}


@dataclass(frozen=True)
class Complete:
    duration_seconds: int

    def as_message(self) -> dict[str, Any]:
        return {"complete": self.duration_seconds}


@dataclass(frozen=True)
class Remaining:
    remaining_seconds: int
    request_id: int

    def as_message(self) -> dict[str, Any]:
        return {"remaining": self.remaining_seconds, "request_id": self.request_id}


CountdownEvent = Tick | Paused | Resumed | Stopped | Complete | Remaining
