"""State transitions for per-file timers.

Every function here takes the current :class:`TrackerState` and returns a new
one. None of them raise for well-formed input; inconsistent calls (stopping
with nothing running, a clock that went backwards) are logged and resolved to
a consistent state.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Iterable, Optional

from .models import Timer, TrackerState

logger = logging.getLogger(__name__)


def valid_timestamp(now: object) -> bool:
    """Return True when ``now`` is usable as a millisecond timestamp."""
    if isinstance(now, bool) or not isinstance(now, (int, float)):
        return False
    if isinstance(now, float) and not math.isfinite(now):
        return False
    return now >= 0


def _check_now(now: object, operation: str) -> bool:
    if valid_timestamp(now):
        return True
    logger.warning("Ignoring %s with invalid timestamp %r.", operation, now)
    return False


def calc_elapsed(now: int, timer: Timer, fs_path: Optional[str] = None) -> int:
    """Return accumulated plus in-flight time, never counting backwards."""
    if timer.start_at is None:
        return timer.accumulated
    if not _check_now(now, "elapsed time lookup"):
        return timer.accumulated
    delta = int(now) - timer.start_at
    if delta < 0:
        logger.warning(
            "Clock moved backwards for %s (start_at=%s, now=%s); keeping %d ms.",
            fs_path or "<unknown>",
            timer.start_at,
            now,
            timer.accumulated,
        )
        return timer.accumulated
    return timer.accumulated + delta


def _with_timer(state: TrackerState, fs_path: str, timer: Timer) -> dict[str, Timer]:
    timers = dict(state.timers)
    timers[fs_path] = timer
    return timers


def start_timer(state: TrackerState, *, now: int, fs_path: str) -> TrackerState:
    """Start (or continue) timing ``fs_path``.

    Excluded files and a paused session leave the state untouched.
    """
    if not fs_path or fs_path in state.excluded_files or not state.is_tracking:
        return state
    if not _check_now(now, "start_timer"):
        return state

    current = state.running_timer()
    if state.current_tracking_file == fs_path and current is not None and current.running:
        return state
    if current is not None and current.running:
        logger.warning(
            "Starting %s while %s is still running; stopping it first.",
            fs_path,
            state.current_tracking_file,
        )
        state = stop_timer(state, now=now)

    existing = state.timers.get(fs_path)
    accumulated = existing.accumulated if existing is not None else 0
    timers = _with_timer(state, fs_path, Timer(start_at=int(now), accumulated=accumulated))
    logger.debug("Started timer for %s at %s.", fs_path, now)
    return replace(state, timers=timers, current_tracking_file=fs_path)


def stop_timer(state: TrackerState, *, now: int) -> TrackerState:
    """Freeze the running timer, if any, into its accumulated total."""
    fs_path = state.current_tracking_file
    if fs_path is None:
        logger.debug("stop_timer called with no active timer.")
        return state
    if not _check_now(now, "stop_timer"):
        return state

    timer = state.timers.get(fs_path)
    if timer is None or timer.start_at is None:
        logger.warning("Timer for %s is not running; nothing to stop.", fs_path)
        return replace(state, current_tracking_file=None)

    elapsed = calc_elapsed(now, timer, fs_path)
    timers = _with_timer(state, fs_path, Timer(start_at=None, accumulated=elapsed))
    logger.debug("Stopped timer for %s at %s (%d ms).", fs_path, now, elapsed)
    return replace(state, timers=timers, current_tracking_file=None)


def switch_timer(state: TrackerState, *, now: int, fs_path: str) -> TrackerState:
    """Stop the current timer and start ``fs_path`` at the same instant."""
    return start_timer(stop_timer(state, now=now), now=now, fs_path=fs_path)


def pause(state: TrackerState, *, now: int) -> TrackerState:
    if state.current_tracking_file is not None and not _check_now(now, "pause"):
        return state
    return stop_timer(replace(state, is_tracking=False), now=now)


def resume(state: TrackerState, *, now: int, fs_path: Optional[str] = None) -> TrackerState:
    state = replace(state, is_tracking=True)
    if fs_path:
        return switch_timer(state, now=now, fs_path=fs_path)
    return state


def switch_tracking(
    state: TrackerState, *, now: int, fs_path: Optional[str] = None
) -> TrackerState:
    """Pause when tracking, resume otherwise."""
    if state.is_tracking:
        return pause(state, now=now)
    return resume(state, now=now, fs_path=fs_path)


def reset(state: TrackerState) -> TrackerState:
    """Drop every timer; tracking flag and exclusions are kept."""
    return replace(state, timers={}, current_tracking_file=None)


def load_timer(state: TrackerState, entries: Iterable[tuple[str, int]]) -> TrackerState:
    """Replace all timers with stopped ones holding the given totals."""
    timers: dict[str, Timer] = {}
    for fs_path, elapsed in entries:
        if fs_path in timers:
            logger.warning("Duplicate saved entry for %s; keeping the later one.", fs_path)
        if not valid_timestamp(elapsed):
            logger.warning("Invalid saved time %r for %s; loading it as 0 ms.", elapsed, fs_path)
            elapsed = 0
        timers[fs_path] = Timer(start_at=None, accumulated=int(elapsed))
    return replace(state, timers=timers, current_tracking_file=None)


def add_exclude(state: TrackerState, fs_path: str, *, now: int) -> TrackerState:
    """Exclude ``fs_path``, freezing its timer if it is the running one."""
    if fs_path in state.excluded_files:
        return state
    if state.current_tracking_file == fs_path:
        if not _check_now(now, "add_exclude"):
            return state
        state = stop_timer(state, now=now)
    return replace(state, excluded_files=state.excluded_files | {fs_path})


def remove_exclude(state: TrackerState, fs_path: str) -> TrackerState:
    if fs_path not in state.excluded_files:
        return state
    return replace(state, excluded_files=state.excluded_files - {fs_path})


def toggle_exclude(state: TrackerState, fs_path: str, *, now: int) -> TrackerState:
    if fs_path in state.excluded_files:
        return remove_exclude(state, fs_path)
    return add_exclude(state, fs_path, now=now)
