"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional

from .models import TrackerState
from .selectors import TimeCard, elapsed_time_if_included, time_card, total_time


TRACKING_ICON = "[>]"
PAUSED_ICON = "[||]"


def format_duration(milliseconds: Optional[int]) -> str:
    if milliseconds is None:
        return "--:--:--"
    total_seconds = max(int(milliseconds), 0) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def status_line(state: TrackerState, now: int, current_file: Optional[str] = None) -> str:
    """Total time and the focused file's time, as shown in a status bar."""
    icon = TRACKING_ICON if state.is_tracking else PAUSED_ICON
    total = format_duration(total_time(state, now))
    current = (
        format_duration(elapsed_time_if_included(state, now, current_file))
        if current_file
        else format_duration(None)
    )
    return f"{icon} {total} | {current}"


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, state: TrackerState, now: int) -> None:
        self.state = state
        self.now = now

    def print_status(self, current_file: Optional[str] = None) -> None:
        print(status_line(self.state, self.now, current_file))
        print(f"Tracking:       {'on' if self.state.is_tracking else 'paused'}")
        print(f"Tracked files:  {len(self.state.timers)}")
        print(f"Excluded files: {len(self.state.excluded_files)}")
        for fs_path in sorted(self.state.excluded_files):
            print(f"  - {fs_path}")

    def print_time_card(self, limit: int = 10) -> None:
        card = time_card(self.state, self.now, limit=limit)
        if not card.entries:
            print("No time recorded yet.")
            return
        for line in render_time_card(card):
            print(line)


def render_time_card(card: TimeCard) -> list[str]:
    lines = [
        "Time Card",
        "-" * 40,
        f"Total time: {format_duration(card.total)}",
        "",
        f"Top files ({len(card.entries)} of {card.file_count}):",
    ]
    for entry in card.entries:
        name = PurePath(entry.fs_path).name or entry.fs_path
        share = (entry.elapsed / card.total * 100) if card.total else 0.0
        lines.append(f"  {name[:40]:<40} {format_duration(entry.elapsed)} {share:5.1f}%")
    return lines
