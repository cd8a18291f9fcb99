"""whstats package

Compare hours booked in Redmine with hours clocked in the timelogger database,
day by day.

Public API (minimal for now):
- reduce_clock_events: raw clock-in/clock-out events -> clocked hours per day
- reconcile: booked entries + clocked hours -> ordered day records
- ensure_credentials: runtime configuration helper

CLI entrypoint exposed via setup.py as `whstats`.
"""
__version__ = "1.0.0"

from .core import reconcile, reduce_clock_events  # noqa: E402
from .login_helper import ensure_credentials  # noqa: E402 re-export

__all__ = [
    "reconcile",
    "reduce_clock_events",
    "ensure_credentials",
    "__version__",
]
