"""Conversion between :class:`TrackerState` and the durable session record.

The record never carries a live ``start_at``: running timers are flattened to
their elapsed value at save time, and restoring never yields a running timer.
Tracking resumes only when the editor reports focus again.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .engine import load_timer, switch_tracking, valid_timestamp
from .models import TrackerState
from .selectors import elapsed_time
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


class PersistedFileData(BaseModel):
    fs_path: str = Field(
        validation_alias=AliasChoices("fsPath", "fs_path"),
        serialization_alias="fsPath",
    )
    elapsed_time: int = Field(
        ge=0,
        validation_alias=AliasChoices("elapsedTime", "elapsed_time"),
        serialization_alias="elapsedTime",
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PersistedRecord(BaseModel):
    # "excludeFiles" and "lastSavedAt" are the names used by older records.
    excluded_files: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("excludedFiles", "excludeFiles", "excluded_files"),
        serialization_alias="excludedFiles",
    )
    is_tracking: bool = Field(
        default=True,
        validation_alias=AliasChoices("isTracking", "is_tracking"),
        serialization_alias="isTracking",
    )
    file_data: list[PersistedFileData] = Field(
        default_factory=list,
        validation_alias=AliasChoices("fileData", "file_data"),
        serialization_alias="fileData",
    )
    saved_at: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("savedAt", "lastSavedAt", "saved_at"),
        serialization_alias="savedAt",
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def serialize(state: TrackerState, now: int) -> PersistedRecord:
    """Flatten ``state`` into a record, evaluating running timers at ``now``."""
    saved_at: Optional[int] = int(now) if valid_timestamp(now) else None
    if saved_at is None:
        logger.warning("Serializing with invalid timestamp %r; savedAt left empty.", now)
    file_data: list[PersistedFileData] = []
    for fs_path in state.timers:
        elapsed = elapsed_time(state, now, fs_path)
        if elapsed is not None and elapsed > 0:
            file_data.append(PersistedFileData(fs_path=fs_path, elapsed_time=elapsed))
    return PersistedRecord(
        excluded_files=sorted(state.excluded_files),
        is_tracking=state.is_tracking,
        file_data=file_data,
        saved_at=saved_at,
    )


def record_to_payload(record: PersistedRecord) -> dict[str, Any]:
    return record.model_dump(by_alias=True)


def deserialize(record: PersistedRecord, now: Optional[int] = None) -> TrackerState:
    """Rebuild a state from ``record``; no timer comes back running."""
    state = TrackerState.empty()
    state = load_timer(state, ((entry.fs_path, entry.elapsed_time) for entry in record.file_data))
    state = replace(state, excluded_files=frozenset(record.excluded_files))
    if record.is_tracking != state.is_tracking:
        moment = now if now is not None else (record.saved_at or 0)
        state = switch_tracking(state, now=moment)
    return state


def parse_record(payload: Any) -> Optional[PersistedRecord]:
    """Validate a raw stored payload; corrupt payloads come back as None."""
    if payload is None:
        return None
    try:
        return PersistedRecord.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Discarding corrupt session record: %s", exc)
        return None


def load_state(store: KeyValueStore, key: str, now: Optional[int] = None) -> TrackerState:
    """Restore the session from ``store``; falls back to an empty state."""
    try:
        payload = store.get(key)
    except Exception:
        logger.exception("Failed to read session record %s; starting fresh.", key)
        return TrackerState.empty()

    record = parse_record(payload)
    if record is None:
        logger.info("No previous data found for %s; starting fresh.", key)
        return TrackerState.empty()

    state = deserialize(record, now)
    logger.info(
        "Restored %d file timer(s) and %d exclusion(s) from %s.",
        len(state.timers),
        len(state.excluded_files),
        key,
    )
    return state


def save_state(store: KeyValueStore, key: str, state: TrackerState, now: int) -> bool:
    """Write ``state`` to ``store``; failures are logged and reported as False."""
    try:
        store.set(key, record_to_payload(serialize(state, now)))
    except Exception:
        logger.exception("Failed to save session record %s.", key)
        return False
    logger.debug("Saved session record %s at %s.", key, now)
    return True
