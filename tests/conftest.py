from __future__ import annotations

import pytest

from edit_timer.config import TrackerSettings
from edit_timer.session import TrackerSession
from edit_timer.storage import MemoryStore


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, milliseconds: int) -> int:
        self.now += milliseconds
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(start=1_000)


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def settings() -> TrackerSettings:
    return TrackerSettings()


@pytest.fixture()
def session(store: MemoryStore, settings: TrackerSettings, clock: FakeClock) -> TrackerSession:
    tracker = TrackerSession(store, settings, clock=clock)
    yield tracker
    tracker.set_display_visible(False)
    tracker.dispose()
