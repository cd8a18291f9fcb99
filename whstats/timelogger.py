"""Timelogger database access: raw clock events from MSSQL ``event_logs``."""

from __future__ import annotations

import datetime
import logging
from contextlib import contextmanager
from typing import Any, Iterator

import pyodbc
from dateutil import parser as date_parser

from .config import Config
from .errors import ConfigError, UpstreamFetchError
from .models import ClockEvent, ClockKind

logger = logging.getLogger(__name__)

ODBC_DRIVER = "ODBC Driver 18 for SQL Server"
CONNECT_TIMEOUT = 8

CLOCK_EVENTS_SQL = """
    SELECT [date] AS event_time, [clock]
    FROM event_logs
    WHERE user_id = ?
      AND CAST([date] AS DATE) >= ?
      AND CAST([date] AS DATE) <= ?
    ORDER BY [date]
"""


def build_connection_string(config: Config, driver: str = ODBC_DRIVER) -> str:
    return (
        f"DRIVER={{{driver}}};"
        f"SERVER={config.mssql_server};"
        f"DATABASE={config.mssql_database};"
        f"UID={config.mssql_user};"
        f"PWD={config.mssql_password};"
        "Encrypt=no;"
        "TrustServerCertificate=yes;"
    )


@contextmanager
def get_connection(config: Config) -> Iterator[pyodbc.Connection]:
    logger.debug(
        "DB: connecting to %s / %s as %s",
        config.mssql_server,
        config.mssql_database,
        config.mssql_user or "<empty>",
    )
    try:
        conn = pyodbc.connect(build_connection_string(config), timeout=CONNECT_TIMEOUT)
    except pyodbc.Error as e:
        raise UpstreamFetchError(
            f"Could not connect to timelogger database {config.mssql_server}/{config.mssql_database}: {e}"
        ) from e
    try:
        yield conn
    finally:
        conn.close()


def _to_timestamp(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    return date_parser.parse(str(value))


def _normalize_clock_flag(value: Any) -> ClockKind | None:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    if parsed in (ClockKind.CLOCK_IN, ClockKind.CLOCK_OUT):
        return ClockKind(parsed)
    return None


def rows_to_events(rows) -> list[ClockEvent]:
    """Convert ``(event_time, clock)`` rows; rows with an unknown clock flag are dropped.

    A timestamp that cannot be parsed raises UpstreamFetchError.
    """
    events = []
    for event_time, clock in rows:
        kind = _normalize_clock_flag(clock)
        if kind is None or event_time is None:
            logger.debug("Skipping event row %r / %r", event_time, clock)
            continue
        try:
            timestamp = _to_timestamp(event_time)
        except (ValueError, OverflowError) as e:
            raise UpstreamFetchError(f"Unreadable timestamp in event_logs: {event_time!r}") from e
        events.append(ClockEvent(timestamp=timestamp, kind=kind))
    return events


def fetch_clock_events(config: Config, start: datetime.date, end: datetime.date) -> list[ClockEvent]:
    """Clock events of the configured user with a calendar day in ``start``..``end``."""
    try:
        user_id = int(config.user_id)
    except ValueError as e:
        raise ConfigError(f"User ID must be numeric, got {config.user_id!r}") from e

    with get_connection(config) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(CLOCK_EVENTS_SQL, user_id, start, end)
            rows = cursor.fetchall()
        except pyodbc.Error as e:
            raise UpstreamFetchError(f"Timelogger query failed: {e}") from e
        finally:
            cursor.close()

    events = rows_to_events(rows)
    logger.debug("Fetched %d clock events for user %s", len(events), user_id)
    return events
