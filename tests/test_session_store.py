"""
Tests for the SQLite session store.
"""

from datetime import date

from conftest import NOW, add_session, at, bulk_add_sessions
from focusplan.analytics.store import SessionType, TaskRecord


class TestQuerySessions:
    def test_oldest_first(self, store):
        add_session(store, at(1, 10))
        add_session(store, at(3, 10))
        records = store.query_sessions("u1")
        assert [r.started_at for r in records] == [at(3, 10), at(1, 10)]

    def test_round_trips_fields(self, store):
        new_id = add_session(store, at(1, 9, 30), duration=50, completed=False, interruptions=2)
        [record] = store.query_sessions("u1")
        assert record.id == new_id
        assert record.duration == 50
        assert record.started_at == at(1, 9, 30)
        assert record.completed_at is None
        assert not record.is_completed
        assert record.was_interrupted
        assert record.interruption_count == 2

    def test_filters(self, store):
        add_session(store, at(40, 10))
        add_session(store, at(2, 10), completed=False)
        add_session(store, at(1, 10))
        add_session(store, at(1, 11), type=SessionType.SHORT_BREAK)
        add_session(store, at(1, 12), user_id="someone-else")

        assert len(store.query_sessions("u1")) == 4
        assert len(store.query_sessions("u1", since=at(30, 0))) == 3
        assert len(store.query_sessions("u1", until=at(2, 23))) == 2
        assert len(store.query_sessions("u1", session_type=SessionType.WORK)) == 3
        assert len(store.query_sessions("u1", completed_only=True)) == 3
        assert len(store.query_sessions("u1", limit=1)) == 1
        assert store.query_sessions("nobody") == []


class TestTasks:
    def test_counts_follow_latest_status(self, store):
        store.upsert_task(TaskRecord("t1", "u1", "pending", at(2, 9)))
        store.upsert_task(TaskRecord("t2", "u1", "completed", at(2, 9)))
        assert store.task_counts("u1") == (2, 1)

        store.upsert_task(TaskRecord("t1", "u1", "completed", at(1, 9)))
        assert store.task_counts("u1") == (2, 2)

    def test_empty_user(self, store):
        assert store.task_counts("nobody") == (0, 0)


class TestDailyAnalytics:
    def test_one_row_per_day_including_empty_days(self, store):
        add_session(store, at(1, 10))
        daily = store.daily_analytics("u1", since=at(2, 0), until=NOW)
        assert [d.date for d in daily] == [date(2024, 1, 13), date(2024, 1, 14), date(2024, 1, 15)]
        assert daily[0].total_work_sessions == 0
        assert daily[0].focus_score == 0

    def test_day_aggregates(self, store):
        add_session(store, at(1, 9), duration=25)
        add_session(store, at(1, 10), duration=25, completed=False, interruptions=1)
        add_session(store, at(1, 11), duration=5, type=SessionType.SHORT_BREAK)
        store.upsert_task(TaskRecord("t1", "u1", "completed", at(1, 15)))

        [day] = store.daily_analytics("u1", since=at(1, 0), until=at(1, 23))
        assert day.total_work_sessions == 2
        assert day.completed_work_sessions == 1
        assert day.total_work_minutes == 25
        assert day.total_break_minutes == 5
        assert day.completed_tasks == 1
        # half completed, one interruption per two sessions
        assert day.focus_score == 25

    def test_interrupted_but_finished_is_not_clean(self, store):
        add_session(store, at(0, 9), interruptions=1)
        [day] = store.daily_analytics("u1", since=NOW, until=NOW)
        assert day.completed_work_sessions == 0
        assert day.total_work_minutes == 25
        assert day.focus_score == 0


class TestProductivityByHour:
    def test_groups_completed_work_by_start_hour(self, store):
        add_session(store, at(1, 10), duration=25)
        add_session(store, at(2, 10, 30), duration=50)
        add_session(store, at(1, 14), duration=25)
        add_session(store, at(1, 15), completed=False)
        add_session(store, at(1, 16), type=SessionType.LONG_BREAK)

        rows = store.productivity_by_hour("u1")
        assert [(r.hour, r.completed_sessions, r.total_minutes) for r in rows] == [
            (10, 2, 75),
            (14, 1, 25),
        ]


class TestLimit:
    def test_limit_keeps_most_recent_sessions(self, store):
        for d in (5, 4, 3, 2, 1):
            add_session(store, at(d, 9))
        records = store.query_sessions("u1", limit=2)
        assert [r.started_at for r in records] == [at(2, 9), at(1, 9)]

    def test_no_limit_by_default(self, store):
        bulk_add_sessions(store, 10_050, at(2000, 9))
        assert len(store.query_sessions("u1")) == 10_050

