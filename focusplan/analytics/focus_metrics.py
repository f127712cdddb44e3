"""
Focus Metrics — dashboard-level numbers derived from the session history:
focus score, daily streak, most productive time block, week-over-week trend
and least-interrupted session length.

Every calculation degrades to its neutral value on failure; get_focus_metrics
returns None if the whole summary cannot be built.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Tuple

from ..clock import Clock, system_clock
from ..logging_config import get_logger
from .stats import clamp, mean, round_half_up, round_to_nearest
from .store import SessionRecord, SessionStore, SessionType

logger = get_logger(__name__)

TREND_IMPROVING = "improving"
TREND_STABLE = "stable"
TREND_DECLINING = "declining"

# (label, first hour, last hour), inclusive; anything else is night
PRODUCTIVE_TIME_BLOCKS: List[Tuple[str, int, int]] = [
    ("early morning (5-9 AM)", 5, 8),
    ("morning (9 AM-1 PM)", 9, 12),
    ("afternoon (1-5 PM)", 13, 16),
    ("evening (5-9 PM)", 17, 20),
]
NIGHT_BLOCK = "night (9 PM-5 AM)"


@dataclass
class FocusMetrics:
    focus_score: int
    completed_sessions: int
    total_focus_time: int                 # minutes
    average_session_length: int           # minutes
    streak: int                           # consecutive active days
    most_productive_time: str
    completed_tasks: int
    interruption_rate: float              # mean interruptions per session
    focus_trend: str
    recommended_session_length: int
    recommended_break_length: int


def productive_time_label(hour: int) -> str:
    for label, first, last in PRODUCTIVE_TIME_BLOCKS:
        if first <= hour <= last:
            return label
    return NIGHT_BLOCK


def week_score(sessions: List[SessionRecord]) -> Optional[float]:
    """Completion rate minus 5 points per mean interruption; None if nothing completed."""
    if not sessions:
        return None
    completion_rate = sum(1 for s in sessions if s.is_completed) * 100.0 / len(sessions)
    if not completion_rate:
        return None
    return completion_rate - mean([s.interruption_count for s in sessions]) * 5


class FocusMetricsService:

    def __init__(self, store: SessionStore, clock: Clock = system_clock, lookback_days: int = 30):
        self._store = store
        self._clock = clock
        self._lookback_days = lookback_days

    # ------------------------------------------------------------------
    # Individual metrics (synchronous, run inside the executor)
    # ------------------------------------------------------------------

    def calculate_focus_score(self, user_id: str) -> int:
        try:
            now = self._clock()
            since = now - timedelta(days=self._lookback_days)
            recent = self._store.query_sessions(user_id, since=since)
            work = [s for s in recent if s.type == SessionType.WORK]
            if not work:
                return 0

            clean = sum(1 for s in work if s.is_completed and not s.was_interrupted)
            completion_rate = clean / len(work) * 100

            active_days = {s.started_at.date() for s in recent}
            consistency = len(active_days) / 30 * 100

            total_tasks, completed_tasks = self._store.task_counts(user_id)
            task_rate = completed_tasks / total_tasks * 100 if total_tasks else 0.0

            penalty = min(mean([s.interruption_count for s in work]) * 5, 20)

            score = round_half_up(
                completion_rate * 0.4 + consistency * 0.3 + task_rate * 0.3 - penalty
            )
            return int(clamp(score, 0, 100))
        except Exception:
            logger.exception("focus_score_failed", user_id=user_id)
            return 0

    def calculate_streak(self, user_id: str) -> int:
        try:
            completed = self._store.query_sessions(
                user_id, session_type=SessionType.WORK, completed_only=True
            )
            days = sorted({s.started_at.date() for s in completed}, reverse=True)
            if not days:
                return 0

            today = self._clock().date()
            if days[0] not in (today, today - timedelta(days=1)):
                return 0

            streak = 1
            for current, previous in zip(days, days[1:]):
                if (current - previous).days != 1:
                    break
                streak += 1
            return streak
        except Exception:
            logger.exception("streak_failed", user_id=user_id)
            return 0

    def most_productive_time(self, user_id: str) -> str:
        try:
            completed = self._store.query_sessions(
                user_id, session_type=SessionType.WORK, completed_only=True
            )
            if not completed:
                return ""
            groups: dict = {}
            for s in completed:
                groups.setdefault(productive_time_label(s.started_at.hour), []).append(s.duration)
            # most sessions first, then longest average session
            return max(groups.items(), key=lambda g: (len(g[1]), mean(g[1])))[0]
        except Exception:
            logger.exception("productive_time_failed", user_id=user_id)
            return ""

    def calculate_focus_trend(self, user_id: str) -> str:
        try:
            now = self._clock()
            one_week_ago = now - timedelta(days=7)
            two_weeks_ago = now - timedelta(days=14)

            older = self._store.query_sessions(
                user_id, since=two_weeks_ago, until=one_week_ago, session_type=SessionType.WORK
            )
            recent = self._store.query_sessions(
                user_id, since=one_week_ago, session_type=SessionType.WORK
            )

            older_score = week_score(older)
            recent_score = week_score(recent)
            if older_score is None or recent_score is None:
                return TREND_STABLE

            difference = recent_score - older_score
            if difference >= 5:
                return TREND_IMPROVING
            if difference <= -5:
                return TREND_DECLINING
            return TREND_STABLE
        except Exception:
            logger.exception("focus_trend_failed", user_id=user_id)
            return TREND_STABLE

    def calculate_recommended_durations(self, user_id: str) -> Tuple[int, int]:
        """(session minutes, break minutes) from the least-interrupted 30 % of completed sessions."""
        try:
            completed = self._store.query_sessions(
                user_id, session_type=SessionType.WORK, completed_only=True
            )
            if len(completed) < 5:
                return 25, 5

            ranked = sorted(completed, key=lambda s: s.interruption_count)
            top = ranked[: math.ceil(len(ranked) * 0.3)]

            session_length = int(clamp(round_to_nearest(mean([s.duration for s in top])), 15, 45))
            break_length = int(clamp(round_half_up(session_length * 0.2), 3, 15))
            return session_length, break_length
        except Exception:
            logger.exception("recommended_durations_failed", user_id=user_id)
            return 25, 5

    def build_metrics(self, user_id: str) -> FocusMetrics:
        since = self._clock() - timedelta(days=self._lookback_days)
        recent = self._store.query_sessions(user_id, since=since)
        completed_work = [s for s in recent if s.type == SessionType.WORK and s.is_completed]
        _, completed_tasks = self._store.task_counts(user_id)
        session_length, break_length = self.calculate_recommended_durations(user_id)

        return FocusMetrics(
            focus_score=self.calculate_focus_score(user_id),
            completed_sessions=len(completed_work),
            total_focus_time=sum(s.duration for s in recent),
            average_session_length=round_half_up(mean([s.duration for s in recent])),
            streak=self.calculate_streak(user_id),
            most_productive_time=self.most_productive_time(user_id),
            completed_tasks=completed_tasks,
            interruption_rate=mean([s.interruption_count for s in recent]),
            focus_trend=self.calculate_focus_trend(user_id),
            recommended_session_length=session_length,
            recommended_break_length=break_length,
        )

    # ------------------------------------------------------------------
    # Async entry point
    # ------------------------------------------------------------------

    async def get_focus_metrics(self, user_id: str) -> Optional[FocusMetrics]:
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self.build_metrics, user_id)
        except Exception:
            logger.exception("focus_metrics_failed", user_id=user_id)
            return None
