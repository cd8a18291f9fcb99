"""Console rendering of reconciled day records."""

from __future__ import annotations

from typing import Iterable

from .models import BookedEntry, DayRecord
from .utils import format_hours, truncate_comment

NO_DATA_MESSAGE = "No time entries found for the selected period."


def format_day_line(record: DayRecord) -> str:
    clocked = "-" if record.clocked_hours is None else format_hours(record.clocked_hours)
    return (
        f"{record.iso_day} {record.day_name}: "
        f"{format_hours(record.booked_hours)} booked / {clocked} clocked"
    )


def format_entry_line(entry: BookedEntry) -> str:
    issue_ref = f"#{entry.issue_ref}" if entry.issue_ref is not None else "#N/A"
    comment = truncate_comment(entry.comment or "(no comment)")
    return f"  - {issue_ref} {format_hours(entry.hours)} {comment}"


def render_lines(records: Iterable[DayRecord], brief: bool = False) -> list[str]:
    lines = []
    for record in records:
        lines.append(format_day_line(record))
        if brief:
            continue
        for entry in record.entries:
            lines.append(format_entry_line(entry))
    return lines


def display_results(records: list[DayRecord], brief: bool = False, echo=print) -> None:
    if not records:
        echo(NO_DATA_MESSAGE)
        return
    echo("")
    for line in render_lines(records, brief=brief):
        echo(line)
    echo("")
