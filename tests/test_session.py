from __future__ import annotations

import threading
from datetime import timedelta

from edit_timer.config import TrackerSettings
from edit_timer.persistence import PersistedRecord, record_to_payload
from edit_timer.selectors import elapsed_time, total_time
from edit_timer.session import SessionSnapshot, TrackerSession
from edit_timer.storage import MemoryStore

KEY = TrackerSettings().storage_key


def _saved(store: MemoryStore) -> PersistedRecord:
    return PersistedRecord.model_validate(store.get(KEY))


def test_focus_changes_switch_between_files(session, clock) -> None:
    session.initialize()
    session.focus_changed("a.txt")
    clock.advance(400)
    session.focus_changed("b.txt")
    clock.advance(100)
    session.focus_changed(None)

    state = session.state
    assert elapsed_time(state, clock.now, "a.txt") == 400
    assert elapsed_time(state, clock.now, "b.txt") == 100
    assert state.current_tracking_file is None


def test_blank_focus_is_treated_as_no_file(session, clock) -> None:
    session.focus_changed("a.txt")
    clock.advance(50)
    session.focus_changed("   ")

    assert session.active_file is None
    assert session.state.current_tracking_file is None


def test_pause_and_resume_follow_active_file(session, clock, store) -> None:
    session.focus_changed("a.txt")
    clock.advance(100)
    session.pause()
    clock.advance(1_000)
    session.resume()
    clock.advance(50)

    assert session.state.is_tracking is True
    assert session.state.current_tracking_file == "a.txt"
    assert elapsed_time(session.state, clock.now, "a.txt") == 150
    assert _saved(store).is_tracking is True


def test_toggle_saves_immediately(session, clock, store) -> None:
    session.focus_changed("a.txt")
    clock.advance(200)
    session.toggle()

    record = _saved(store)
    assert record.is_tracking is False
    assert record.file_data[0].elapsed_time == 200


def test_reset_restarts_active_file(session, clock) -> None:
    session.focus_changed("a.txt")
    clock.advance(300)
    session.focus_changed("b.txt")
    clock.advance(300)
    session.reset()
    clock.advance(20)

    assert list(session.state.timers) == ["b.txt"]
    assert elapsed_time(session.state, clock.now, "b.txt") == 20


def test_exclude_active_file_and_reinclude(session, clock) -> None:
    session.focus_changed("a.txt")
    clock.advance(100)
    session.toggle_exclude()
    clock.advance(500)

    assert total_time(session.state, clock.now) == 0
    assert session.state.current_tracking_file is None

    session.toggle_exclude("a.txt")
    clock.advance(25)
    assert session.state.current_tracking_file == "a.txt"
    assert total_time(session.state, clock.now) == 125


def test_reinclude_without_resume_policy(store, clock) -> None:
    settings = TrackerSettings(resume_on_include=False)
    session = TrackerSession(store, settings, clock=clock)
    session.focus_changed("a.txt")
    session.toggle_exclude("a.txt")
    session.toggle_exclude("a.txt")

    assert session.state.current_tracking_file is None
    assert "a.txt" not in session.state.excluded_files


def test_blank_exclude_target_does_not_fall_back_to_active_file(session, clock) -> None:
    session.focus_changed("a.txt")
    before = session.state

    assert session.toggle_exclude("   ") is before
    assert "a.txt" not in session.state.excluded_files


def test_toggle_exclude_without_target_is_noop(session) -> None:
    before = session.state

    assert session.toggle_exclude() is before


def test_initialize_restores_saved_record(store, clock) -> None:
    store.set(
        KEY,
        {
            "excludedFiles": ["b.txt"],
            "isTracking": False,
            "fileData": [{"fsPath": "a.txt", "elapsedTime": 5_000}],
            "savedAt": 10,
        },
    )
    session = TrackerSession(store, clock=clock)
    try:
        state = session.initialize()

        assert state.is_tracking is False
        assert state.excluded_files == frozenset({"b.txt"})
        assert elapsed_time(state, clock.now, "a.txt") == 5_000
        assert session.intervals_running()["auto_save"] is True
    finally:
        session.dispose()


def test_dispose_stops_intervals_and_saves(store, clock) -> None:
    session = TrackerSession(store, clock=clock, on_tick=lambda snapshot: None)
    session.initialize()
    session.set_display_visible(True)
    session.focus_changed("a.txt")
    clock.advance(750)

    assert session.dispose() is True
    assert session.intervals_running() == {"auto_save": False, "tick": False}
    assert record_to_payload(_saved(store))["fileData"] == [
        {"fsPath": "a.txt", "elapsedTime": 750}
    ]


def test_tick_only_reads_state(store, clock) -> None:
    seen: list[SessionSnapshot] = []
    ticked = threading.Event()

    def on_tick(snapshot: SessionSnapshot) -> None:
        seen.append(snapshot)
        ticked.set()

    settings = TrackerSettings(tick_interval=timedelta(milliseconds=10))
    session = TrackerSession(store, settings, clock=clock, on_tick=on_tick)
    session.focus_changed("a.txt")
    before = session.state
    session.set_display_visible(True)
    try:
        assert ticked.wait(timeout=5)
    finally:
        session.set_display_visible(False)

    assert session.state is before
    assert seen[0].active_file == "a.txt"
    assert session.intervals_running()["tick"] is False


def test_snapshot_reports_active_file(session, clock) -> None:
    session.focus_changed("a.txt")
    clock.advance(90)
    snapshot = session.snapshot()

    assert snapshot.active_file_elapsed == 90
    assert snapshot.total == 90
    assert snapshot.is_tracking is True
    assert [entry.fs_path for entry in snapshot.files] == ["a.txt"]


def test_independent_sessions_do_not_share_state(clock) -> None:
    first = TrackerSession(MemoryStore(), clock=clock)
    second = TrackerSession(MemoryStore(), clock=clock)
    first.focus_changed("a.txt")

    assert second.state.timers == {}
