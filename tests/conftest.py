"""
Pytest configuration and shared fixtures.
"""

import datetime
import sys
from pathlib import Path

import pytest

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from whstats.config import Config  # noqa: E402
from whstats.models import BookedEntry, ClockEvent, ClockKind  # noqa: E402


def clock_in(day, hh, mm=0, ss=0):
    return ClockEvent(datetime.datetime.combine(day, datetime.time(hh, mm, ss)), ClockKind.CLOCK_IN)


def clock_out(day, hh, mm=0, ss=0):
    return ClockEvent(datetime.datetime.combine(day, datetime.time(hh, mm, ss)), ClockKind.CLOCK_OUT)


@pytest.fixture
def sample_config():
    return Config(
        redmine_url="https://redmine.example.com",
        redmine_api_key="0123456789abcdef",
        mssql_server="10.0.0.5",
        mssql_database="wh_timelogger",
        mssql_user="reader",
        mssql_password="secret",
        user_id="42",
    )


@pytest.fixture
def sample_entries():
    """Two 4h bookings on one day plus one on the next."""
    return [
        BookedEntry(day=datetime.date(2026, 2, 3), hours=4.0, issue_ref=101, comment="Sprint planning"),
        BookedEntry(day=datetime.date(2026, 2, 3), hours=4.0, issue_ref=102, comment="Code review"),
        BookedEntry(day=datetime.date(2026, 2, 4), hours=2.5, issue_ref=None, comment=""),
    ]


class FakeKeyring:
    """In-memory stand-in for the keyring module's get/set/delete API."""

    def __init__(self):
        self.store = {}

    def get_password(self, service, name):
        return self.store.get((service, name))

    def set_password(self, service, name, value):
        self.store[(service, name)] = value

    def delete_password(self, service, name):
        from keyring.errors import PasswordDeleteError

        if (service, name) not in self.store:
            raise PasswordDeleteError("not found")
        del self.store[(service, name)]


@pytest.fixture
def fake_keyring(monkeypatch):
    fake = FakeKeyring()
    monkeypatch.setattr("whstats.login_helper.keyring", fake)
    return fake
