"""Plain value types shared by the fetchers, the core and the renderer."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import IntEnum


class ClockKind(IntEnum):
    """Value of the ``clock`` column in the timelogger ``event_logs`` table."""

    CLOCK_OUT = 0
    CLOCK_IN = 1


@dataclass(frozen=True)
class ClockEvent:
    timestamp: datetime.datetime
    kind: ClockKind

    @property
    def day(self) -> datetime.date:
        return self.timestamp.date()


@dataclass(frozen=True)
class BookedEntry:
    """One Redmine time entry, reduced to what the comparison needs."""

    day: datetime.date
    hours: float
    issue_ref: int | None = None
    comment: str = ""


@dataclass(frozen=True)
class DayRecord:
    day: datetime.date
    day_name: str
    booked_hours: float
    clocked_hours: float | None = None
    entries: tuple[BookedEntry, ...] = field(default_factory=tuple)

    @property
    def iso_day(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True)
class RedmineUser:
    id: int
    firstname: str
    lastname: str

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()
