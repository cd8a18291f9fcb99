import datetime

import dateparser

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def get_date_range(days=7, today=None):
    """Return ``(start, end)`` covering ``days`` days back through today, both inclusive."""
    if today is None:
        today = datetime.date.today()
    return today - datetime.timedelta(days=days), today


def parse_date_expression(value):
    """Parse '2026-02-01', 'yesterday', 'last monday' and the like into a date."""
    parsed = dateparser.parse(value, settings={"PREFER_DATES_FROM": "past"})
    if parsed is None:
        raise ValueError(f"Could not parse the date: {value}")
    return parsed.date()


def format_hours(hours):
    if float(hours).is_integer():
        return f"{int(hours)}h"
    return f"{hours:.2f}h"


def truncate_comment(comment, max_length=50):
    if len(comment) <= max_length:
        return comment
    return comment[: max_length - 3] + "..."


def get_day_name(day):
    return DAY_NAMES[day.weekday()]
