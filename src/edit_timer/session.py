"""Event wiring between an editor host and the timer state.

A :class:`TrackerSession` owns the current :class:`TrackerState` value and
replaces it with whatever the transition engine returns. Each event reads the
clock exactly once and threads that value through every transition and
selector it triggers.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from . import engine
from .config import TrackerSettings
from .intervals import IntervalTimer
from .models import FileTime, TrackerState
from .normalization import normalize_fs_path
from .persistence import load_state, save_state
from .selectors import (
    TimeCard,
    elapsed_time_if_included,
    file_times,
    time_card,
    total_time,
)
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def current_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Everything a renderer needs for one redraw."""

    now: int
    is_tracking: bool
    active_file: Optional[str]
    current_tracking_file: Optional[str]
    active_file_elapsed: Optional[int]
    total: int
    files: list[FileTime]


class TrackerSession:
    def __init__(
        self,
        store: KeyValueStore,
        settings: Optional[TrackerSettings] = None,
        *,
        clock: Optional[Clock] = None,
        on_tick: Optional[Callable[[SessionSnapshot], None]] = None,
    ) -> None:
        self.store = store
        self.settings = settings or TrackerSettings()
        self._clock = clock or current_millis
        self._on_tick = on_tick
        self._lock = threading.RLock()
        self._state = TrackerState.empty()
        self._active_file: Optional[str] = None
        self._auto_save = IntervalTimer(
            "auto-save", self.settings.auto_save_interval, self._auto_save_tick
        )
        self._ticker = IntervalTimer("tick", self.settings.tick_interval, self._tick)

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def active_file(self) -> Optional[str]:
        return self._active_file

    def initialize(self) -> TrackerState:
        """Restore the saved record and start periodic saving."""
        with self._lock:
            self._state = load_state(self.store, self.settings.storage_key, self._clock())
        self._auto_save.start()
        return self._state

    def dispose(self) -> bool:
        """Stop every interval, then write the final record."""
        self._ticker.stop()
        self._auto_save.stop()
        with self._lock:
            now = self._clock()
            saved = save_state(self.store, self.settings.storage_key, self._state, now)
        if saved:
            logger.info("Session saved on shutdown.")
        return saved

    # Editor events

    def focus_changed(self, fs_path: Optional[str]) -> TrackerState:
        """The editor now shows ``fs_path`` (None when no file is focused)."""
        fs_path = normalize_fs_path(fs_path)
        with self._lock:
            now = self._clock()
            self._active_file = fs_path
            if fs_path:
                self._state = engine.switch_timer(self._state, now=now, fs_path=fs_path)
            else:
                self._state = engine.stop_timer(self._state, now=now)
            return self._state

    # Commands

    def toggle(self) -> TrackerState:
        with self._lock:
            now = self._clock()
            self._state = engine.switch_tracking(
                self._state, now=now, fs_path=self._active_file
            )
            return self._after_command(now)

    def pause(self) -> TrackerState:
        with self._lock:
            now = self._clock()
            self._state = engine.pause(self._state, now=now)
            return self._after_command(now)

    def resume(self) -> TrackerState:
        with self._lock:
            now = self._clock()
            self._state = engine.resume(self._state, now=now, fs_path=self._active_file)
            return self._after_command(now)

    def reset(self) -> TrackerState:
        """Clear all timers and restart timing of the focused file."""
        with self._lock:
            now = self._clock()
            state = engine.reset(self._state)
            if self._active_file:
                state = engine.start_timer(state, now=now, fs_path=self._active_file)
            self._state = state
            return self._after_command(now)

    def toggle_exclude(self, fs_path: Optional[str] = None) -> TrackerState:
        """Flip exclusion of ``fs_path``, defaulting to the focused file."""
        with self._lock:
            if fs_path is None:
                target = self._active_file
            else:
                target = normalize_fs_path(fs_path)
            if not target:
                logger.info("No file to toggle exclusion for.")
                return self._state
            now = self._clock()
            state = engine.toggle_exclude(self._state, target, now=now)
            reincluded = target not in state.excluded_files
            if reincluded and self.settings.resume_on_include and target == self._active_file:
                state = engine.start_timer(state, now=now, fs_path=target)
            logger.info(
                "%s %s.", "Included" if reincluded else "Excluded", target
            )
            self._state = state
            return self._after_command(now)

    def save_now(self) -> bool:
        with self._lock:
            return save_state(self.store, self.settings.storage_key, self._state, self._clock())

    # Rendering

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            state = self._state
            active = self._active_file
            now = self._clock()
        return SessionSnapshot(
            now=now,
            is_tracking=state.is_tracking,
            active_file=active,
            current_tracking_file=state.current_tracking_file,
            active_file_elapsed=elapsed_time_if_included(state, now, active) if active else None,
            total=total_time(state, now),
            files=file_times(state, now, include_excluded=True),
        )

    def time_card(self, limit: int = 10) -> TimeCard:
        with self._lock:
            state = self._state
            now = self._clock()
        return time_card(state, now, limit=limit)

    def set_display_visible(self, visible: bool) -> None:
        """Start or suspend the redraw tick."""
        if visible and self._on_tick is not None:
            self._ticker.start()
        else:
            self._ticker.stop()

    def intervals_running(self) -> dict[str, bool]:
        return {
            "auto_save": self._auto_save.is_running(),
            "tick": self._ticker.is_running(),
        }

    def _after_command(self, now: int) -> TrackerState:
        if self.settings.save_on_command:
            save_state(self.store, self.settings.storage_key, self._state, now)
        return self._state

    def _auto_save_tick(self) -> None:
        if self.save_now():
            logger.debug("Auto-save completed.")

    def _tick(self) -> None:
        if self._on_tick is not None:
            self._on_tick(self.snapshot())
