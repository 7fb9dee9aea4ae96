"""Command-line interface for the edit timer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from . import engine
from .config import TrackerSettings
from .models import TrackerState
from .normalization import normalize_fs_path
from .paths import get_db_path, get_log_path
from .persistence import load_state, save_state
from .reporting import SummaryPrinter
from .session import current_millis
from .storage import SqliteStore

app = typer.Typer(help="Per-file edit time tracker.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

DB_OPTION = typer.Option(
    None,
    "--db",
    path_type=Path,
    help="Location of the session SQLite database.",
)


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def _store(db_path: Optional[Path]) -> SqliteStore:
    return SqliteStore(db_path or get_db_path())


@app.command()
def status(
    fs_path: Optional[str] = typer.Option(
        None, "--file", help="Also show the time recorded for this file."
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Print the saved totals and tracking state."""
    now = current_millis()
    state = load_state(_store(db_path), TrackerSettings().storage_key, now)
    SummaryPrinter(state, now).print_status(normalize_fs_path(fs_path))


@app.command()
def card(
    limit: int = typer.Option(10, "--limit", min=1, help="Number of files to list."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Print the time card: top files by time spent."""
    now = current_millis()
    state = load_state(_store(db_path), TrackerSettings().storage_key, now)
    SummaryPrinter(state, now).print_time_card(limit=limit)


@app.command()
def exclude(
    fs_path: str = typer.Argument(..., help="File identifier to exclude or re-include."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Toggle whether a file's time is counted."""
    target = normalize_fs_path(fs_path)
    if not target:
        raise typer.BadParameter("file identifier must not be empty")
    store = _store(db_path)
    key = TrackerSettings().storage_key
    now = current_millis()
    state = engine.toggle_exclude(load_state(store, key, now), target, now=now)
    _save_or_exit(store, key, state, now)
    excluded = target in state.excluded_files
    typer.echo(f"{'Excluded' if excluded else 'Included'} {target}")


@app.command()
def toggle(db_path: Optional[Path] = DB_OPTION) -> None:
    """Pause tracking, or resume it when paused."""
    store = _store(db_path)
    key = TrackerSettings().storage_key
    now = current_millis()
    state = engine.switch_tracking(load_state(store, key, now), now=now)
    _save_or_exit(store, key, state, now)
    typer.echo("Tracking resumed" if state.is_tracking else "Tracking paused")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Discard every recorded file time (exclusions are kept)."""
    if not yes:
        typer.confirm("Discard all recorded times?", abort=True)
    store = _store(db_path)
    key = TrackerSettings().storage_key
    now = current_millis()
    state = engine.reset(load_state(store, key, now))
    _save_or_exit(store, key, state, now)
    typer.echo("All timers reset")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(8765, "--port", min=1, max=65535, help="TCP port for the API."),
    db_path: Optional[Path] = DB_OPTION,
    auto_save_seconds: float = typer.Option(
        300.0,
        "--auto-save",
        min=1.0,
        help="Seconds between automatic saves.",
    ),
    resume_on_include: bool = typer.Option(
        True,
        "--resume-on-include/--no-resume-on-include",
        help="Restart the focused file's timer when it is re-included.",
    ),
    log_to_file: bool = typer.Option(
        False, "--log-file/--no-log-file", help="Also write logs to the data directory."
    ),
) -> None:
    """Run the local API that editor plugins report to."""
    from .server_runner import run_server

    if log_to_file:
        handler = logging.FileHandler(get_log_path(), encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)

    settings = TrackerSettings.from_intervals(
        auto_save_seconds=auto_save_seconds,
        resume_on_include=resume_on_include,
    )
    run_server(host=host, port=port, db_path=db_path or get_db_path(), settings=settings)


def _save_or_exit(store: SqliteStore, key: str, state: TrackerState, now: int) -> None:
    if not save_state(store, key, state, now):
        typer.echo("Failed to save the session; see the log for details.", err=True)
        raise typer.Exit(code=1)
