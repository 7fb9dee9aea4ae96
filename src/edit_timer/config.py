"""Configuration models and helpers for the edit timer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


DEFAULT_STORAGE_KEY = "editTimer.persistentData"


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for a tracking session."""

    auto_save_interval: timedelta = timedelta(minutes=5)
    tick_interval: timedelta = timedelta(seconds=1)
    storage_key: str = DEFAULT_STORAGE_KEY
    save_on_command: bool = True
    resume_on_include: bool = True

    @classmethod
    def from_intervals(
        cls,
        auto_save_seconds: float,
        tick_seconds: float | None = None,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        resume_on_include: bool = True,
    ) -> "TrackerSettings":
        tick = tick_seconds if tick_seconds is not None else min(auto_save_seconds, 1.0)
        return cls(
            auto_save_interval=timedelta(seconds=auto_save_seconds),
            tick_interval=timedelta(seconds=tick),
            storage_key=storage_key,
            resume_on_include=resume_on_include,
        )
