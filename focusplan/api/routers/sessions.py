"""
/sessions — record and list focus/break session history and task status.

This is the write side the analytics services read from; records are
append-only.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from ...analytics.store import SessionRecord, SessionStore, SessionType, TaskRecord
from ...api.schemas import SessionIn, SessionOut, TaskStatusIn
from ...clock import to_local

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_store(request: Request) -> SessionStore:
    return request.app.state.store


def _session_out(r: SessionRecord) -> SessionOut:
    return SessionOut(
        id=r.id,
        user_id=r.user_id,
        type=r.type.value,
        duration=r.duration,
        started_at=r.started_at,
        completed_at=r.completed_at,
        is_completed=r.is_completed,
        was_interrupted=r.was_interrupted,
        interruption_count=r.interruption_count,
    )


@router.post("", response_model=SessionOut, status_code=201)
def record_session(session: SessionIn, store: SessionStore = Depends(_get_store)):
    record = SessionRecord(
        id=None,
        user_id=session.user_id,
        type=SessionType(session.type),
        duration=session.duration,
        started_at=to_local(session.started_at),
        completed_at=to_local(session.completed_at) if session.completed_at else None,
        is_completed=session.is_completed,
        was_interrupted=session.was_interrupted,
        interruption_count=session.interruption_count,
    )
    record.id = store.append_session(record)
    return _session_out(record)


@router.get("", response_model=List[SessionOut])
def list_sessions(
    user_id: str = Query(...),
    since: Optional[datetime] = Query(default=None, description="Earliest start time"),
    until: Optional[datetime] = Query(default=None, description="Latest start time"),
    type: Optional[str] = Query(default=None, pattern="^(work|short_break|long_break)$"),
    limit: int = Query(default=200, ge=1, le=1000, description="Most recent sessions to return"),
    store: SessionStore = Depends(_get_store),
):
    records = store.query_sessions(
        user_id,
        since=to_local(since) if since else None,
        until=to_local(until) if until else None,
        session_type=SessionType(type) if type else None,
        limit=limit,
    )
    return [_session_out(r) for r in records]


@router.post("/tasks", status_code=202)
def record_task_status(
    task: TaskStatusIn,
    request: Request,
    store: SessionStore = Depends(_get_store),
):
    """Upsert the latest known status of a task (feeds task-completion metrics)."""
    updated_at = to_local(task.updated_at) if task.updated_at else request.app.state.clock()
    store.upsert_task(TaskRecord(
        id=task.id, user_id=task.user_id, status=task.status, updated_at=updated_at,
    ))
    return {"status": "accepted"}
