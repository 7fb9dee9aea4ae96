"""FastAPI application through which an editor reports events and reads timers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .config import TrackerSettings
from .models import FileTime
from .normalization import normalize_fs_path
from .paths import get_db_path
from .reporting import format_duration
from .session import Clock, SessionSnapshot, TrackerSession
from .storage import KeyValueStore, SqliteStore

logger = logging.getLogger(__name__)


class FocusPayload(BaseModel):
    fs_path: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class ExcludePayload(BaseModel):
    fs_path: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    store: Optional[KeyValueStore] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_db_path = Path(db_path or get_db_path())
    resolved_store = store if store is not None else SqliteStore(resolved_db_path)
    session = TrackerSession(resolved_store, settings or TrackerSettings(), clock=clock)

    app = FastAPI(title="Edit Timer", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_path = resolved_db_path
    app.state.session = session

    @app.on_event("startup")
    async def _startup() -> None:
        session.initialize()
        logger.info("Edit timer session started; storing state in %s", resolved_db_path)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        session.dispose()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        snapshot = request.app.state.session.snapshot()
        return _status_payload(snapshot, request.app.state.session)

    @app.get("/api/files")
    def files(
        request: Request,
        include_excluded: bool = Query(
            default=True, description="Also list files that are excluded."
        ),
    ) -> Dict[str, Any]:
        snapshot = request.app.state.session.snapshot()
        entries = [
            _file_payload(entry)
            for entry in snapshot.files
            if include_excluded or not entry.excluded
        ]
        return {"now": snapshot.now, "files": entries}

    @app.get("/api/time-card")
    def card(
        request: Request,
        limit: int = Query(default=10, ge=1, le=100, description="Number of files to list."),
    ) -> Dict[str, Any]:
        result = request.app.state.session.time_card(limit)
        return {
            "total_ms": result.total,
            "total": format_duration(result.total),
            "file_count": result.file_count,
            "entries": [_file_payload(entry) for entry in result.entries],
        }

    @app.post("/api/focus")
    def focus(payload: FocusPayload, request: Request) -> Dict[str, Any]:
        session: TrackerSession = request.app.state.session
        session.focus_changed(payload.fs_path)
        return _status_payload(session.snapshot(), session)

    @app.post("/api/tracking/{action}")
    def tracking(action: str, request: Request) -> Dict[str, Any]:
        session: TrackerSession = request.app.state.session
        handlers = {
            "toggle": session.toggle,
            "pause": session.pause,
            "resume": session.resume,
        }
        handler = handlers.get(action)
        if handler is None:
            raise HTTPException(status_code=404, detail=f"Unknown tracking action: {action}")
        handler()
        return _status_payload(session.snapshot(), session)

    @app.post("/api/reset")
    def reset(request: Request) -> Dict[str, Any]:
        session: TrackerSession = request.app.state.session
        session.reset()
        return _status_payload(session.snapshot(), session)

    @app.post("/api/exclude")
    def exclude(payload: ExcludePayload, request: Request) -> Dict[str, Any]:
        session: TrackerSession = request.app.state.session
        if payload.fs_path is None:
            target = session.active_file
            if not target:
                raise HTTPException(
                    status_code=400, detail="fs_path is required when no file is focused"
                )
        else:
            target = normalize_fs_path(payload.fs_path)
            if not target:
                raise HTTPException(status_code=400, detail="fs_path must not be blank")
        state = session.toggle_exclude(target)
        return {"fs_path": target, "excluded": target in state.excluded_files}

    @app.post("/api/save")
    def save(request: Request) -> Dict[str, Any]:
        saved = request.app.state.session.save_now()
        if not saved:
            raise HTTPException(status_code=503, detail="Failed to persist session.")
        return {"saved": True}

    return app


def _status_payload(snapshot: SessionSnapshot, session: TrackerSession) -> Dict[str, Any]:
    return {
        "now": snapshot.now,
        "is_tracking": snapshot.is_tracking,
        "active_file": snapshot.active_file,
        "current_tracking_file": snapshot.current_tracking_file,
        "active_file_ms": snapshot.active_file_elapsed,
        "active_file_time": format_duration(snapshot.active_file_elapsed),
        "total_ms": snapshot.total,
        "total": format_duration(snapshot.total),
        "tracked_files": len(snapshot.files),
        "excluded_files": sorted(session.state.excluded_files),
        "intervals": session.intervals_running(),
    }


def _file_payload(entry: FileTime) -> Dict[str, Any]:
    return {
        "fs_path": entry.fs_path,
        "elapsed_ms": entry.elapsed,
        "elapsed": format_duration(entry.elapsed),
        "excluded": entry.excluded,
        "running": entry.running,
    }
