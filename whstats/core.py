"""Clock-interval reduction and the per-day booked/clocked reconciliation.

Both functions are pure: everything they depend on, including the reference
"now" used to close open sessions, is passed in.
"""

from __future__ import annotations

import datetime
from collections import defaultdict
from types import MappingProxyType
from typing import Iterable, Mapping

from .models import BookedEntry, ClockEvent, ClockKind, DayRecord
from .utils import get_day_name

DayClockedHours = Mapping[str, float]


def _session_length(started: datetime.datetime, ended: datetime.datetime) -> datetime.timedelta:
    if ended <= started:
        return datetime.timedelta(0)
    return ended - started


def _clocked_time(day_events: list[ClockEvent], now: datetime.datetime) -> datetime.timedelta:
    """Sum the sessions of one day.

    A clock-in is closed by the event right after it when that event is a
    clock-out; otherwise the session is still open and runs until ``now``.
    Clock-outs never open a session, so orphans drop out on their own.
    """
    total = datetime.timedelta(0)
    for index, event in enumerate(day_events):
        if event.kind != ClockKind.CLOCK_IN:
            continue
        ended = now
        if index + 1 < len(day_events) and day_events[index + 1].kind == ClockKind.CLOCK_OUT:
            ended = day_events[index + 1].timestamp
        total += _session_length(event.timestamp, ended)
    return total


def reduce_clock_events(
    events: Iterable[ClockEvent],
    start: datetime.date,
    end: datetime.date,
    now: datetime.datetime,
) -> DayClockedHours:
    """Reduce raw clock events to clocked hours per ISO day, ``start``..``end`` inclusive.

    Days without a clock-in get no key at all.
    """
    by_day: dict[datetime.date, list[ClockEvent]] = defaultdict(list)
    for event in events:
        if start <= event.day <= end:
            by_day[event.day].append(event)

    clocked: dict[str, float] = {}
    for day in sorted(by_day):
        day_events = sorted(by_day[day], key=lambda e: e.timestamp)
        if not any(e.kind == ClockKind.CLOCK_IN for e in day_events):
            continue
        clocked_time = _clocked_time(day_events, now)
        clocked[day.isoformat()] = round(clocked_time / datetime.timedelta(hours=1), 2)
    return MappingProxyType(clocked)


def group_by_day(entries: Iterable[BookedEntry]) -> dict[str, list[BookedEntry]]:
    grouped: dict[str, list[BookedEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.day.isoformat(), []).append(entry)
    return grouped


def reconcile(entries: Iterable[BookedEntry], clocked: DayClockedHours) -> list[DayRecord]:
    """Merge booked entries and clocked hours into one record per day, oldest first.

    A day missing from ``clocked`` gets ``clocked_hours=None``, which is not the
    same as a day clocked at zero.
    """
    grouped = group_by_day(entries)
    records = []
    for iso_day in sorted(set(grouped) | set(clocked)):
        day_entries = grouped.get(iso_day, [])
        booked_hours = 0.0
        for entry in day_entries:
            booked_hours += entry.hours
        day = datetime.date.fromisoformat(iso_day)
        records.append(
            DayRecord(
                day=day,
                day_name=get_day_name(day),
                booked_hours=booked_hours,
                clocked_hours=clocked.get(iso_day),
                entries=tuple(day_entries),
            )
        )
    return records
