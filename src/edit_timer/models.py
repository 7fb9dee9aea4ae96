"""Domain models for per-file edit time."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True, slots=True)
class Timer:
    """Accrued activity for one file.

    ``start_at`` is set only while the timer is running; ``accumulated`` holds
    the milliseconds frozen as of the last stop.
    """

    start_at: Optional[int] = None
    accumulated: int = 0

    @property
    def running(self) -> bool:
        return self.start_at is not None


def _freeze(timers: Mapping[str, Timer]) -> Mapping[str, Timer]:
    return MappingProxyType(dict(timers))


@dataclass(frozen=True, slots=True)
class TrackerState:
    """Aggregate timer state for one editing session.

    Instances are never changed in place; the transition engine returns new
    ones.
    """

    timers: Mapping[str, Timer] = field(default_factory=dict)
    current_tracking_file: Optional[str] = None
    is_tracking: bool = True
    excluded_files: frozenset[str] = frozenset()

    # The timer mapping is a read-only view, which cannot be hashed.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "timers", _freeze(self.timers))
        object.__setattr__(self, "excluded_files", frozenset(self.excluded_files))

    @classmethod
    def empty(cls) -> "TrackerState":
        return cls()

    def running_timer(self) -> Optional[Timer]:
        if self.current_tracking_file is None:
            return None
        return self.timers.get(self.current_tracking_file)


@dataclass(frozen=True, slots=True)
class FileTime:
    """Read model for a single tracked file."""

    fs_path: str
    elapsed: int
    excluded: bool
    running: bool
