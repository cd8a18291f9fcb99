"""Redmine REST client: current user and booked time entries."""

from __future__ import annotations

import datetime
import logging

import requests

from .config import Config
from .errors import UpstreamFetchError
from .models import BookedEntry, RedmineUser

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
TIMEOUT = 15


def create_session(config: Config) -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "X-Redmine-API-Key": config.redmine_api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    )
    return session


def _get_json(session: requests.Session, url: str, params=None) -> dict:
    try:
        response = session.get(url, params=params, timeout=TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise UpstreamFetchError(f"Could not reach Redmine at {url}: {e}") from e
    if not response.ok:
        raise UpstreamFetchError(
            f"Redmine API error: {response.status_code} {response.reason}",
            status_code=response.status_code,
        )
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamFetchError(f"Redmine returned invalid JSON from {url}") from e


def fetch_current_user(config: Config, session: requests.Session | None = None) -> RedmineUser:
    session = session or create_session(config)
    url = f"{config.redmine_url}/my/account.json"
    data = _get_json(session, url)
    try:
        user = data["user"]
        return RedmineUser(
            id=int(user["id"]),
            firstname=user.get("firstname", ""),
            lastname=user.get("lastname", ""),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise UpstreamFetchError(f"Unexpected Redmine user payload from {url}: {e!r}") from e


def parse_time_entry(raw: dict) -> BookedEntry:
    issue = raw.get("issue") or {}
    return BookedEntry(
        day=datetime.date.fromisoformat(raw["spent_on"]),
        hours=float(raw["hours"]),
        issue_ref=issue.get("id"),
        comment=raw.get("comments") or "",
    )


def fetch_time_entries(
    config: Config,
    user_id: int,
    start: datetime.date,
    end: datetime.date,
    session: requests.Session | None = None,
) -> list[BookedEntry]:
    """Fetch every time entry of ``user_id`` spent between ``start`` and ``end`` inclusive.

    Pages through ``offset``/``limit`` until ``total_count`` entries are read.
    Entries come back in the order Redmine returned them.
    """
    session = session or create_session(config)
    url = f"{config.redmine_url}/time_entries.json"
    entries: list[BookedEntry] = []
    offset = 0
    while True:
        params = {
            "user_id": user_id,
            "from": start.isoformat(),
            "to": end.isoformat(),
            "limit": PAGE_SIZE,
            "offset": offset,
        }
        data = _get_json(session, url, params=params)
        try:
            chunk = data.get("time_entries", [])
            entries.extend(parse_time_entry(raw) for raw in chunk)
            total = int(data.get("total_count", len(entries)))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise UpstreamFetchError(f"Unexpected time entry payload from {url}: {e!r}") from e
        offset += len(chunk)
        if not chunk or offset >= total:
            break
    logger.debug("Fetched %d time entries from %s", len(entries), url)
    return entries
