from __future__ import annotations

from edit_timer import engine
from edit_timer.models import Timer, TrackerState
from edit_timer.selectors import (
    elapsed_time,
    elapsed_time_if_included,
    file_times,
    is_excluded,
    time_card,
    total_time,
    tracked_file_count,
)


def _sample_state() -> TrackerState:
    return TrackerState(
        timers={
            "a.txt": Timer(start_at=None, accumulated=400),
            "b.txt": Timer(start_at=1_000, accumulated=100),
            "c.txt": Timer(start_at=None, accumulated=900),
        },
        current_tracking_file="b.txt",
        excluded_files=frozenset({"c.txt"}),
    )


def test_elapsed_time_for_untracked_file_is_none() -> None:
    assert elapsed_time(TrackerState.empty(), 10, "missing.txt") is None


def test_elapsed_time_includes_in_flight_interval() -> None:
    state = _sample_state()

    assert elapsed_time(state, 1_250, "b.txt") == 350
    assert elapsed_time(state, 1_250, "a.txt") == 400


def test_elapsed_time_if_included_hides_excluded() -> None:
    state = _sample_state()

    assert elapsed_time_if_included(state, 1_250, "c.txt") is None
    assert elapsed_time(state, 1_250, "c.txt") == 900
    assert elapsed_time_if_included(state, 1_250, "a.txt") == 400


def test_total_time_skips_excluded_and_counts_live_timer() -> None:
    state = _sample_state()

    assert total_time(state, 1_000) == 500
    assert total_time(state, 2_000) == 1_500


def test_total_time_excludes_running_excluded_file() -> None:
    state = TrackerState(
        timers={"a.txt": Timer(start_at=0, accumulated=0)},
        current_tracking_file="a.txt",
        excluded_files=frozenset({"a.txt"}),
    )

    assert total_time(state, 10_000) == 0


def test_file_times_are_sorted_longest_first() -> None:
    entries = file_times(_sample_state(), 1_000, include_excluded=True)

    assert [entry.fs_path for entry in entries] == ["c.txt", "a.txt", "b.txt"]
    assert entries[0].excluded is True
    assert entries[2].running is True


def test_file_times_omit_excluded_by_default() -> None:
    entries = file_times(_sample_state(), 1_000)

    assert {entry.fs_path for entry in entries} == {"a.txt", "b.txt"}


def test_time_card_lists_top_files_with_total() -> None:
    state = engine.load_timer(
        TrackerState.empty(), [(f"file{i}.py", i * 1_000) for i in range(15)]
    )
    card = time_card(state, 0, limit=3)

    assert [entry.fs_path for entry in card.entries] == ["file14.py", "file13.py", "file12.py"]
    assert card.file_count == 14
    assert card.total == sum(i * 1_000 for i in range(15))


def test_small_helpers() -> None:
    state = _sample_state()

    assert is_excluded(state, "c.txt")
    assert not is_excluded(state, "a.txt")
    assert tracked_file_count(state) == 3
