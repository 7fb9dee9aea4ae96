"""Durable key-value stores for the persisted session record."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from .db import database_connection, fetch_value, upsert_value

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """In-process store; values are deep-copied on the way in and out."""

    def __init__(self, initial: Optional[dict[str, Any]] = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class SqliteStore:
    """JSON values stored in a single SQLite table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def get(self, key: str) -> Optional[Any]:
        with database_connection(self.db_path) as conn:
            raw = fetch_value(conn, key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored value for %s in %s is not valid JSON.", key, self.db_path)
            return None

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with database_connection(self.db_path) as conn:
            upsert_value(conn, key, payload)
