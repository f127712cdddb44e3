"""
Shared pytest fixtures and configuration.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import focusplan.settings as settings_mod
from focusplan.analytics.store import SessionRecord, SessionStore, SessionType
from focusplan.api.app import create_app
from focusplan.clock import fixed_clock

# Monday, 2024-01-15 12:00 local time
NOW = datetime(2024, 1, 15, 12, 0)


def at(days_ago: int, hour: int, minute: int = 0) -> datetime:
    """Local datetime *days_ago* days before NOW at the given wall-clock time."""
    return (NOW - timedelta(days=days_ago)).replace(hour=hour, minute=minute)


def add_session(
    store: SessionStore,
    started_at: datetime,
    duration: int = 25,
    completed: bool = True,
    interruptions: int = 0,
    type: SessionType = SessionType.WORK,
    user_id: str = "u1",
) -> int:
    return store.append_session(SessionRecord(
        id=None,
        user_id=user_id,
        type=type,
        duration=duration,
        started_at=started_at,
        completed_at=started_at + timedelta(minutes=duration) if completed else None,
        is_completed=completed,
        was_interrupted=interruptions > 0,
        interruption_count=interruptions,
    ))


def bulk_add_sessions(store: SessionStore, count: int, started_at: datetime, user_id: str = "u1") -> None:
    """Insert *count* completed 25-minute work sessions, one second apart, in one transaction."""
    ts = started_at.timestamp()
    with store._conn() as conn:
        conn.executemany(
            "INSERT INTO sessions (user_id, type, duration, started_at, completed_at, "
            "is_completed, was_interrupted, interruption_count) "
            "VALUES (?, 'work', 25, ?, ?, 1, 0, 0)",
            [(user_id, ts + i, ts + i + 1500) for i in range(count)],
        )


@pytest.fixture(autouse=True)
def tmp_settings_file(tmp_path, monkeypatch):
    """
    Redirect the settings store to a fresh temp file for each test.
    Also resets the in-memory cache so each test starts clean.
    """
    fake_file = tmp_path / "settings.json"
    monkeypatch.setattr(settings_mod, "_FILE", fake_file)
    monkeypatch.setattr(settings_mod, "_current", {})
    yield fake_file


@pytest.fixture
def store(tmp_path):
    """A fresh SessionStore backed by a temp file."""
    return SessionStore(tmp_path / "sessions.db")


@pytest.fixture
def clock():
    return fixed_clock(NOW)


@pytest.fixture
def app(tmp_path):
    """A fresh app instance with its own database and a frozen clock."""
    return create_app(db_path=tmp_path / "api.db", clock=fixed_clock(NOW))


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
