"""
Integration tests for the FastAPI app.
Uses httpx.AsyncClient with ASGITransport — no running server needed.
"""

from conftest import add_session, at
from focusplan.analytics.store import SessionType

# ── Health ────────────────────────────────────────────────────────────────────

async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# ── Schedule ──────────────────────────────────────────────────────────────────

DEEP_WORK = {
    "id": "deep",
    "title": "Research and analyze market data",
    "priority": "high",
    "estimated_pomodoros": 2,
}
CHORE = {
    "id": "chore",
    "title": "File expense reports",
    "priority": "low",
    "estimated_pomodoros": 1,
}


class TestSchedule:
    async def test_schedule_defaults_to_today(self, client):
        r = await client.post("/schedule", json={"tasks": [DEEP_WORK, CHORE]})
        assert r.status_code == 200
        body = r.json()
        assert body["date"] == "2024-01-15"
        assert len(body["time_blocks"]) == 20
        assert body["profile"]["chronotype"] == "intermediate"
        assert [s["task"]["id"] for s in body["scheduled"]] == ["deep", "chore"]
        assert body["scheduled"][0]["time_block"]["start_time"] == "2024-01-15T09:00:00"
        assert body["scheduled"][0]["block_count"] == 2
        assert body["unscheduled_task_ids"] == []

    async def test_events_block_time(self, client):
        r = await client.post("/schedule", json={
            "tasks": [{"id": "big", "title": "Write report", "estimated_pomodoros": 1}],
            "date": "2024-02-01",
            "existing_events": [
                {"start": "2024-02-01T08:00:00", "end": "2024-02-01T18:00:00"},
            ],
        })
        body = r.json()
        assert body["scheduled"] == []
        assert body["unscheduled_task_ids"] == ["big"]
        assert not any(b["available"] for b in body["time_blocks"])

    async def test_settings_override(self, client):
        r = await client.post("/schedule", json={
            "tasks": [DEEP_WORK],
            "settings": {"early_bird_mode": True, "pomodoro_duration": 50},
        })
        body = r.json()
        assert body["profile"]["chronotype"] == "early-bird"
        assert body["profile"]["focus_session_duration"] == 50
        assert body["scheduled"][0]["time_block"]["start_time"] == "2024-01-15T08:00:00"

    async def test_invalid_priority_returns_422(self, client):
        r = await client.post("/schedule", json={"tasks": [{"id": "x", "title": "x", "priority": "urgent"}]})
        assert r.status_code == 422

    async def test_repeated_task_id_returns_422(self, client):
        r = await client.post("/schedule", json={"tasks": [DEEP_WORK, CHORE, dict(CHORE, title="Sort inbox")]})
        assert r.status_code == 422

    async def test_classify(self, client):
        r = await client.post("/schedule/classify", json=CHORE)
        assert r.status_code == 200
        body = r.json()
        assert body["complexity"] == "low"
        assert body["cognitive_load_type"] == "routine"
        assert body["ideal_energy_level"] == "low"
        assert body["estimated_duration"] == 25

    async def test_blocks_for_day(self, client):
        r = await client.get("/schedule/blocks", params={"day": "2024-03-01"})
        blocks = r.json()
        assert len(blocks) == 20
        assert blocks[0]["start_time"] == "2024-03-01T08:00:00"
        assert blocks[2]["energy_level"] == "high"

    async def test_profile(self, client):
        r = await client.get("/schedule/profile")
        body = r.json()
        assert body["chronotype"] == "intermediate"
        assert body["context_switching_cost"] == 5


# ── Sessions ──────────────────────────────────────────────────────────────────

class TestSessions:
    async def test_record_and_list(self, client):
        r = await client.post("/sessions", json={
            "user_id": "u1",
            "type": "work",
            "duration": 25,
            "started_at": "2024-01-15T09:00:00",
            "completed_at": "2024-01-15T09:25:00",
            "is_completed": True,
        })
        assert r.status_code == 201
        assert r.json()["id"] >= 1

        r = await client.get("/sessions", params={"user_id": "u1"})
        [session] = r.json()
        assert session["type"] == "work"
        assert session["started_at"] == "2024-01-15T09:00:00"

    async def test_list_filters_by_type(self, app, client):
        add_session(app.state.store, at(1, 9))
        add_session(app.state.store, at(1, 10), duration=5, type=SessionType.SHORT_BREAK)
        r = await client.get("/sessions", params={"user_id": "u1", "type": "short_break"})
        assert [s["duration"] for s in r.json()] == [5]

    async def test_invalid_session_type_returns_422(self, client):
        r = await client.post("/sessions", json={
            "user_id": "u1", "type": "nap", "duration": 25,
            "started_at": "2024-01-15T09:00:00",
        })
        assert r.status_code == 422

    async def test_task_status_feeds_metrics(self, client):
        r = await client.post("/sessions/tasks", json={"id": "t1", "user_id": "u1", "status": "completed"})
        assert r.status_code == 202
        r = await client.get("/analytics/focus-metrics", params={"user_id": "u1"})
        assert r.json()["completed_tasks"] == 1


# ── Analytics ─────────────────────────────────────────────────────────────────

class TestAnalytics:
    async def test_recommendations_for_new_user(self, client):
        r = await client.get("/analytics/recommendations", params={"user_id": "new"})
        assert r.status_code == 200
        body = r.json()
        assert body["recommended_work_duration"] == 25
        assert body["confidence"] == 0
        assert body["based_on"]["total_sessions"] == 0

    async def test_recommendations_with_little_history(self, app, client):
        for d in range(1, 4):
            add_session(app.state.store, at(d, 9))
        r = await client.get("/analytics/recommendations", params={"user_id": "u1"})
        assert r.json()["confidence"] <= 25

    async def test_focus_patterns_for_new_user(self, client):
        r = await client.get("/analytics/focus-patterns", params={"user_id": "new"})
        body = r.json()
        assert body["focus_score"] == 0
        assert body["optimal_time_of_day"] is None

    async def test_focus_metrics(self, app, client):
        for d in range(0, 3):
            add_session(app.state.store, at(d, 10))
        r = await client.get("/analytics/focus-metrics", params={"user_id": "u1"})
        assert r.status_code == 200
        body = r.json()
        assert body["streak"] == 3
        assert body["completed_sessions"] == 3
        assert body["most_productive_time"] == "morning (9 AM-1 PM)"

    async def test_daily(self, client):
        r = await client.get("/analytics/daily", params={"user_id": "u1", "days": 7})
        days = r.json()
        assert len(days) == 8
        assert days[-1]["date"] == "2024-01-15"

    async def test_insights(self, client):
        r = await client.get("/analytics/insights", params={"user_id": "u1", "days": 7})
        assert r.status_code == 200
        body = r.json()
        assert body["days"] == 7
        assert body["data_points"] == 8
        assert any(i["title"] == "Building Your Profile" for i in body["insights"])

    async def test_user_id_required(self, client):
        r = await client.get("/analytics/recommendations")
        assert r.status_code == 422
