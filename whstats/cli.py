"""whstats command line: booked (Redmine) vs clocked (timelogger) hours per day."""

from __future__ import annotations

import datetime
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import typer

from . import __version__
from .config import config_exists, delete_config, get_config_path
from .core import reconcile, reduce_clock_events
from .display import NO_DATA_MESSAGE, display_results
from .errors import NoDataError, WhstatsError
from .login_helper import clear_stored_credentials, ensure_credentials, load_config, prompt_for_config
from .redmine import create_session, fetch_current_user, fetch_time_entries
from .timelogger import fetch_clock_events
from .utils import get_date_range, parse_date_expression

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 7
MONTH_DAYS = 30

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def collect_day_records(config, start, end, now=None):
    """Fetch both sources concurrently and reconcile them.

    Any fetch failure aborts the whole comparison. Raises NoDataError when
    neither source has anything in the window.
    """
    if now is None:
        now = datetime.datetime.now()
    session = create_session(config)
    user = fetch_current_user(config, session=session)
    typer.echo(f"\nFetching time entries for {user.full_name}...")

    with ThreadPoolExecutor(max_workers=2) as pool:
        booked_future = pool.submit(fetch_time_entries, config, user.id, start, end, session)
        clock_future = pool.submit(fetch_clock_events, config, start, end)
        entries = booked_future.result()
        events = clock_future.result()

    clocked = reduce_clock_events(events, start, end, now)
    records = reconcile(entries, clocked)
    logger.info(
        "Reconciled %d booked entries and %d clocked days into %d day records",
        len(entries),
        len(clocked),
        len(records),
    )
    if not records:
        raise NoDataError(NO_DATA_MESSAGE)
    return records


def show_config() -> None:
    exists = config_exists()
    typer.echo(f"\n  Config file: {get_config_path()}")
    typer.echo(f"  Status: {'configured' if exists else 'not configured'}\n")
    if not exists:
        return
    config = load_config()
    if config is None:
        return
    typer.echo("  Current settings:")
    typer.echo(f"    Redmine URL:    {config.redmine_url}")
    typer.echo(f"    Redmine API:    {config.masked_api_key()}")
    typer.echo(f"    MSSQL Server:   {config.mssql_server}")
    typer.echo(f"    MSSQL Database: {config.mssql_database}")
    typer.echo(f"    MSSQL User:     {config.mssql_user}")
    typer.echo(f"    User ID:        {config.user_id}\n")


def handle_reset() -> None:
    removed_file = delete_config()
    removed_secrets = clear_stored_credentials()
    if removed_file or removed_secrets:
        typer.echo("\n  Configuration deleted.\n")
    else:
        typer.echo("\n  No configuration file found.\n")


def resolve_window(days: int, date_from: Optional[str], date_to: Optional[str]):
    start, end = get_date_range(days)
    if date_from:
        start = parse_date_expression(date_from)
    if date_to:
        end = parse_date_expression(date_to)
    if start > end:
        raise typer.BadParameter(f"--from {start} is after --to {end}")
    return start, end


@app.command()
def main(
    brief: bool = typer.Option(False, "--brief", "-b", help="Hide the per-entry breakdown."),
    month: bool = typer.Option(False, "--month", "-m", help="Show the last 30 days instead of 7."),
    date_from: Optional[str] = typer.Option(None, "--from", help="Start date, e.g. '2026-02-01' or 'last monday'."),
    date_to: Optional[str] = typer.Option(None, "--to", help="End date (inclusive)."),
    setup: bool = typer.Option(False, "--setup", "-s", help="Configure credentials (interactive)."),
    config_: bool = typer.Option(False, "--config", "-c", help="Show config file location."),
    reset: bool = typer.Option(False, "--reset", "-r", help="Delete saved configuration."),
    version: bool = typer.Option(False, "--version", "-v", help="Show version."),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging to stderr."),
):
    """
    Compare booked hours (Redmine) vs clocked hours (timelogger) per day.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if version:
        typer.echo(f"whstats v{__version__}")
        return
    if config_:
        show_config()
        return
    if reset:
        handle_reset()
        return

    try:
        if setup:
            prompt_for_config(load_config())
            return
        try:
            start, end = resolve_window(MONTH_DAYS if month else DEFAULT_DAYS, date_from, date_to)
        except ValueError as e:
            raise typer.BadParameter(str(e)) from e
        config = ensure_credentials()
        records = collect_day_records(config, start, end)
    except NoDataError as e:
        typer.echo(e.message)
        return
    except WhstatsError as e:
        typer.echo(f"\n  Error: {e.message}\n", err=True)
        raise typer.Exit(code=1)

    display_results(records, brief=brief, echo=typer.echo)


if __name__ == "__main__":  # pragma: no cover
    app()
