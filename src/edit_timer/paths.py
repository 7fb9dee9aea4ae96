"""Helpers for locating application directories."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "EditTimer"
APP_AUTHOR = "EditTimer"
DATA_DIR_ENV = "EDIT_TIMER_DATA_DIR"


def get_data_dir() -> Path:
    """Return the directory holding the session database and logs.

    ``EDIT_TIMER_DATA_DIR`` overrides the per-user platform location.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        path = Path(override).expanduser()
    else:
        path = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR).user_state_path
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    return get_data_dir() / "state.sqlite3"


def get_log_path() -> Path:
    return get_data_dir() / "edit_timer.log"
