"""Read-only views over :class:`TrackerState`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .engine import calc_elapsed
from .models import FileTime, TrackerState


def elapsed_time(state: TrackerState, now: int, fs_path: str) -> Optional[int]:
    """Milliseconds spent in ``fs_path`` as of ``now``, or None if untracked."""
    timer = state.timers.get(fs_path)
    if timer is None:
        return None
    return calc_elapsed(now, timer, fs_path)


def elapsed_time_if_included(state: TrackerState, now: int, fs_path: str) -> Optional[int]:
    if fs_path in state.excluded_files:
        return None
    return elapsed_time(state, now, fs_path)


def total_time(state: TrackerState, now: int) -> int:
    """Sum of elapsed time over every file that is not excluded."""
    return sum(
        calc_elapsed(now, timer, fs_path)
        for fs_path, timer in state.timers.items()
        if fs_path not in state.excluded_files
    )


def is_excluded(state: TrackerState, fs_path: str) -> bool:
    return fs_path in state.excluded_files


def tracked_file_count(state: TrackerState) -> int:
    return len(state.timers)


def file_times(
    state: TrackerState, now: int, *, include_excluded: bool = False
) -> list[FileTime]:
    """Per-file elapsed times, longest first."""
    entries = [
        FileTime(
            fs_path=fs_path,
            elapsed=calc_elapsed(now, timer, fs_path),
            excluded=fs_path in state.excluded_files,
            running=timer.running,
        )
        for fs_path, timer in state.timers.items()
        if include_excluded or fs_path not in state.excluded_files
    ]
    entries.sort(key=lambda entry: (-entry.elapsed, entry.fs_path))
    return entries


@dataclass(frozen=True, slots=True)
class TimeCard:
    """Top files by time spent, with the session total."""

    entries: list[FileTime]
    total: int
    file_count: int


def time_card(state: TrackerState, now: int, limit: int = 10) -> TimeCard:
    ranked = [entry for entry in file_times(state, now) if entry.elapsed > 0]
    return TimeCard(
        entries=ranked[: max(limit, 0)],
        total=total_time(state, now),
        file_count=len(ranked),
    )
