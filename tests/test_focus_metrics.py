"""
Tests for the focus metrics service.
"""

import sqlite3

from conftest import add_session, at, bulk_add_sessions
from focusplan.analytics.focus_metrics import (
    NIGHT_BLOCK,
    FocusMetrics,
    FocusMetricsService,
    productive_time_label,
    week_score,
)
from focusplan.analytics.store import SessionType, TaskRecord


class _BrokenStore:
    def query_sessions(self, *args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    def task_counts(self, user_id):
        raise sqlite3.OperationalError("disk I/O error")


def _service(store, clock):
    return FocusMetricsService(store, clock, lookback_days=30)


# ── Streak ────────────────────────────────────────────────────────────────────

class TestStreak:
    def test_counts_consecutive_days_from_today(self, store, clock):
        for d in (0, 1, 2, 4):
            add_session(store, at(d, 9))
        assert _service(store, clock).calculate_streak("u1") == 3

    def test_streak_may_end_yesterday(self, store, clock):
        for d in (1, 2):
            add_session(store, at(d, 9))
        assert _service(store, clock).calculate_streak("u1") == 2

    def test_stale_streak_is_zero(self, store, clock):
        add_session(store, at(2, 9))
        assert _service(store, clock).calculate_streak("u1") == 0

    def test_only_completed_work_counts(self, store, clock):
        add_session(store, at(0, 9), completed=False)
        add_session(store, at(0, 10), type=SessionType.SHORT_BREAK)
        add_session(store, at(1, 9))
        assert _service(store, clock).calculate_streak("u1") == 1

    def test_recent_day_found_behind_long_history(self, store, clock):
        bulk_add_sessions(store, 10_000, at(2000, 9))
        add_session(store, at(0, 9))
        assert _service(store, clock).calculate_streak("u1") == 1

    def test_several_sessions_same_day(self, store, clock):
        for hour in (9, 11, 15):
            add_session(store, at(0, hour))
        assert _service(store, clock).calculate_streak("u1") == 1


# ── Trend ─────────────────────────────────────────────────────────────────────

class TestTrend:
    def test_declining(self, store, clock):
        for d in range(10, 14):
            add_session(store, at(d, 9))
        for d in range(1, 5):
            add_session(store, at(d, 9), completed=d % 2 == 0)
        assert _service(store, clock).calculate_focus_trend("u1") == "declining"

    def test_improving(self, store, clock):
        for d in range(10, 14):
            add_session(store, at(d, 9), completed=d % 2 == 0)
        for d in range(1, 5):
            add_session(store, at(d, 9))
        assert _service(store, clock).calculate_focus_trend("u1") == "improving"

    def test_stable_without_previous_week(self, store, clock):
        for d in range(1, 5):
            add_session(store, at(d, 9))
        assert _service(store, clock).calculate_focus_trend("u1") == "stable"

    def test_week_score(self, store):
        add_session(store, at(1, 9), interruptions=2)
        add_session(store, at(2, 9), completed=False)
        # 50 % completed, one interruption per session on average
        assert week_score(store.query_sessions("u1")) == 45
        assert week_score([]) is None


# ── Productive time ───────────────────────────────────────────────────────────

class TestProductiveTime:
    def test_labels(self):
        assert productive_time_label(5) == "early morning (5-9 AM)"
        assert productive_time_label(12) == "morning (9 AM-1 PM)"
        assert productive_time_label(13) == "afternoon (1-5 PM)"
        assert productive_time_label(20) == "evening (5-9 PM)"
        assert productive_time_label(21) == NIGHT_BLOCK
        assert productive_time_label(4) == NIGHT_BLOCK

    def test_block_with_most_sessions(self, store, clock):
        for d in range(1, 4):
            add_session(store, at(d, 10))
        add_session(store, at(1, 18), duration=50)
        assert _service(store, clock).most_productive_time("u1") == "morning (9 AM-1 PM)"

    def test_no_history(self, store, clock):
        assert _service(store, clock).most_productive_time("u1") == ""


# ── Recommended durations ─────────────────────────────────────────────────────

class TestRecommendedDurations:
    def test_defaults_below_five_sessions(self, store, clock):
        for d in range(1, 5):
            add_session(store, at(d, 9), duration=40)
        assert _service(store, clock).calculate_recommended_durations("u1") == (25, 5)

    def test_least_interrupted_sessions_drive_length(self, store, clock):
        for d in range(1, 5):
            add_session(store, at(d, 9), duration=40)
        for d in range(5, 11):
            add_session(store, at(d, 9), duration=25, interruptions=1)
        assert _service(store, clock).calculate_recommended_durations("u1") == (40, 8)


# ── Focus score & summary ─────────────────────────────────────────────────────

class TestFocusScore:
    def test_no_sessions(self, store, clock):
        assert _service(store, clock).calculate_focus_score("u1") == 0

    def test_weighted_score(self, store, clock):
        for d in range(1, 11):
            add_session(store, at(d, 9))
        store.upsert_task(TaskRecord("t1", "u1", "completed", at(1, 12)))
        store.upsert_task(TaskRecord("t2", "u1", "pending", at(1, 12)))
        # 100 * 0.4 + (10 / 30 * 100) * 0.3 + 50 * 0.3
        assert _service(store, clock).calculate_focus_score("u1") == 65

    def test_failure_is_zero(self, clock):
        assert _service(_BrokenStore(), clock).calculate_focus_score("u1") == 0


class TestFocusMetrics:
    async def test_summary(self, store, clock):
        for d in range(1, 11):
            add_session(store, at(d, 9))
        add_session(store, at(1, 10), duration=5, type=SessionType.SHORT_BREAK)

        metrics = await _service(store, clock).get_focus_metrics("u1")
        assert isinstance(metrics, FocusMetrics)
        assert metrics.completed_sessions == 10
        assert metrics.total_focus_time == 255
        assert metrics.streak == 10
        assert metrics.most_productive_time == "morning (9 AM-1 PM)"
        assert metrics.focus_trend == "stable"
        assert metrics.interruption_rate == 0
        assert metrics.recommended_session_length == 25
        assert metrics.recommended_break_length == 5

    async def test_failure_returns_none(self, clock):
        assert await _service(_BrokenStore(), clock).get_focus_metrics("u1") is None
