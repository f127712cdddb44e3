"""
Session Store — append-only SQLite store of focus/break session records and
task status snapshots. The analytics services only ever read from it.

Timestamps are stored as Unix seconds and surfaced as naive local datetimes,
so hour-of-day and weekday bucketing follow the user's wall clock.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from .stats import round_half_up


class SessionType(str, Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


@dataclass
class SessionRecord:
    id: Optional[int]
    user_id: str
    type: SessionType
    duration: int                          # planned minutes
    started_at: datetime
    completed_at: Optional[datetime] = None
    is_completed: bool = False
    was_interrupted: bool = False
    interruption_count: int = 0


@dataclass
class TaskRecord:
    id: str
    user_id: str
    status: str
    updated_at: datetime


@dataclass
class DailyAnalytics:
    """Aggregate session statistics for a single local calendar day."""
    date: date
    total_work_sessions: int
    completed_work_sessions: int
    total_work_minutes: int
    total_break_minutes: int
    focus_score: int
    completed_tasks: int


@dataclass
class ProductivityByHour:
    hour: int
    completed_sessions: int
    total_minutes: int


def _ts(moment: Optional[datetime]) -> Optional[float]:
    return moment.timestamp() if moment is not None else None


def _dt(ts: Optional[float]) -> Optional[datetime]:
    return datetime.fromtimestamp(ts) if ts is not None else None


class SessionStore:
    """SQLite-backed session history; one short-lived connection per call."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._init_db()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def append_session(self, record: SessionRecord) -> int:
        with self._conn() as conn:
            cur = conn.execute(
                """
                INSERT INTO sessions
                    (user_id, type, duration, started_at, completed_at,
                     is_completed, was_interrupted, interruption_count)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.user_id,
                    SessionType(record.type).value,
                    record.duration,
                    _ts(record.started_at),
                    _ts(record.completed_at),
                    int(record.is_completed),
                    int(record.was_interrupted),
                    record.interruption_count or 0,
                ),
            )
            return cur.lastrowid  # type: ignore[return-value]

    def upsert_task(self, task: TaskRecord) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO tasks (id, user_id, status, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    status = excluded.status,
                    updated_at = excluded.updated_at
                """,
                (task.id, task.user_id, task.status, _ts(task.updated_at)),
            )

    # ------------------------------------------------------------------
    # Read: raw records
    # ------------------------------------------------------------------

    def query_sessions(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        session_type: Optional[SessionType] = None,
        completed_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[SessionRecord]:
        """
        Sessions for *user_id*, oldest first. With *limit*, only the most
        recent *limit* matching sessions are returned.
        """
        clauses = ["user_id = ?"]
        params: list = [user_id]

        if since is not None:
            clauses.append("started_at >= ?")
            params.append(_ts(since))
        if until is not None:
            clauses.append("started_at <= ?")
            params.append(_ts(until))
        if session_type is not None:
            clauses.append("type = ?")
            params.append(SessionType(session_type).value)
        if completed_only:
            clauses.append("is_completed = 1")

        sql = (
            "SELECT id, user_id, type, duration, started_at, completed_at, "
            "is_completed, was_interrupted, interruption_count "
            f"FROM sessions WHERE {' AND '.join(clauses)}"
        )
        if limit is None:
            sql += " ORDER BY started_at ASC, id ASC"
        else:
            # newest *limit* rows, returned oldest first
            sql = (
                f"SELECT * FROM ({sql} ORDER BY started_at DESC, id DESC LIMIT ?) "
                "ORDER BY started_at ASC, id ASC"
            )
            params.append(limit)

        with self._conn() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [
            SessionRecord(
                id=row[0],
                user_id=row[1],
                type=SessionType(row[2]),
                duration=row[3],
                started_at=_dt(row[4]),
                completed_at=_dt(row[5]),
                is_completed=bool(row[6]),
                was_interrupted=bool(row[7]),
                interruption_count=row[8] or 0,
            )
            for row in rows
        ]

    def task_counts(self, user_id: str) -> Tuple[int, int]:
        """(total tasks, completed tasks) for *user_id*."""
        with self._conn() as conn:
            total, completed = conn.execute(
                "SELECT COUNT(*), COALESCE(SUM(status = 'completed'), 0) "
                "FROM tasks WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return int(total), int(completed)

    # ------------------------------------------------------------------
    # Read: aggregates
    # ------------------------------------------------------------------

    def daily_analytics(
        self,
        user_id: str,
        since: datetime,
        until: datetime,
    ) -> List[DailyAnalytics]:
        """
        One DailyAnalytics row per calendar day from since.date() to
        until.date() inclusive; days without sessions are zero rows.
        """
        first = since.date()
        last = until.date()
        window_start = datetime(first.year, first.month, first.day)
        window_end = datetime(last.year, last.month, last.day) + timedelta(days=1)

        records = self.query_sessions(
            user_id, since=window_start, until=window_end - timedelta(microseconds=1)
        )
        by_day: Dict[date, List[SessionRecord]] = {}
        for r in records:
            by_day.setdefault(r.started_at.date(), []).append(r)

        task_days: Dict[date, int] = {}
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT updated_at FROM tasks WHERE user_id = ? AND status = 'completed' "
                "AND updated_at >= ? AND updated_at < ?",
                (user_id, _ts(window_start), _ts(window_end)),
            ).fetchall()
        for (ts,) in rows:
            day = _dt(ts).date()
            task_days[day] = task_days.get(day, 0) + 1

        result = []
        day = first
        while day <= last:
            day_records = by_day.get(day, [])
            result.append(_build_day(day, day_records, task_days.get(day, 0)))
            day += timedelta(days=1)
        return result

    def productivity_by_hour(
        self,
        user_id: str,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[ProductivityByHour]:
        """Completed work sessions grouped by local start hour, ascending."""
        records = self.query_sessions(
            user_id, since=since, until=until,
            session_type=SessionType.WORK, completed_only=True,
        )
        hours: Dict[int, ProductivityByHour] = {}
        for r in records:
            bucket = hours.setdefault(r.started_at.hour, ProductivityByHour(r.started_at.hour, 0, 0))
            bucket.completed_sessions += 1
            bucket.total_minutes += r.duration
        return [hours[h] for h in sorted(hours)]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id            TEXT    NOT NULL,
                    type               TEXT    NOT NULL,
                    duration           INTEGER NOT NULL,
                    started_at         REAL    NOT NULL,
                    completed_at       REAL,
                    is_completed       INTEGER NOT NULL DEFAULT 0,
                    was_interrupted    INTEGER NOT NULL DEFAULT 0,
                    interruption_count INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id         TEXT PRIMARY KEY,
                    user_id    TEXT NOT NULL,
                    status     TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_sessions_user_ts ON sessions(user_id, started_at)"
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id)")

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_day(day: date, records: List[SessionRecord], completed_tasks: int) -> DailyAnalytics:
    work = [r for r in records if r.type == SessionType.WORK]
    completed = [r for r in work if r.is_completed and not r.was_interrupted]
    interruptions = sum(r.interruption_count for r in work)

    focus_score = 0
    if work:
        completion_ratio = len(completed) / len(work)
        interruption_ratio = min(1.0, interruptions / len(work))
        focus_score = round_half_up(completion_ratio * (1 - interruption_ratio) * 100)

    return DailyAnalytics(
        date=day,
        total_work_sessions=len(work),
        completed_work_sessions=len(completed),
        total_work_minutes=sum(r.duration for r in work if r.is_completed),
        total_break_minutes=sum(
            r.duration for r in records if r.type != SessionType.WORK and r.is_completed
        ),
        focus_score=focus_score,
        completed_tasks=completed_tasks,
    )

