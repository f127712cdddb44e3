"""
Adaptive Sessions — recommends timer durations and summarises focus patterns
from a user's recent work-session history.

Both entry points are read-only and never raise: a failed query is logged
and the zeroed default result is returned instead.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

from ..clock import DAY_NAMES, Clock, system_clock, weekday_name
from ..logging_config import get_logger
from .stats import clamp, mean, mode, round_half_up, round_to_nearest
from .store import SessionRecord, SessionStore, SessionType

logger = get_logger(__name__)

DEFAULT_WORK_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15

MIN_SESSIONS_FOR_RECOMMENDATION = 5
MIN_MODE_OCCURRENCES = 3

# Recommendation buckets: (name, start hour inclusive, end hour exclusive)
TIME_OF_DAY_BUCKETS: List[Tuple[str, int, int]] = [
    ("morning", 5, 12),
    ("afternoon", 12, 17),
    ("evening", 17, 22),
    ("night", 22, 5),
]

# Focus-pattern slots are finer grained in the morning
FOCUS_PATTERN_SLOTS: List[Tuple[str, int, int]] = [
    ("early morning", 5, 9),
    ("morning", 9, 12),
    ("afternoon", 12, 17),
    ("evening", 17, 22),
    ("night", 22, 5),
]

@dataclass
class RecommendationBasis:
    total_sessions: int = 0
    completed_sessions: int = 0
    average_interruptions: float = 0.0
    time_of_day: Optional[str] = None


@dataclass
class SessionRecommendation:
    recommended_work_duration: int = DEFAULT_WORK_MINUTES
    recommended_short_break_duration: int = DEFAULT_SHORT_BREAK_MINUTES
    recommended_long_break_duration: int = DEFAULT_LONG_BREAK_MINUTES
    confidence: int = 0                       # 0-100
    based_on: RecommendationBasis = field(default_factory=RecommendationBasis)


@dataclass
class UserFocusPattern:
    optimal_time_of_day: Optional[str] = None
    optimal_duration: Optional[int] = None
    average_interruptions: float = 0.0
    completion_rate: float = 0.0              # 0-100
    most_productive_day: Optional[str] = None
    focus_score: int = 0                      # 0-100


def in_slot(hour: int, start: int, end: int) -> bool:
    if start <= end:
        return start <= hour < end
    return hour >= start or hour < end        # wraps past midnight


def average_interruptions(sessions: List[SessionRecord]) -> float:
    return mean([s.interruption_count or 0 for s in sessions])


def interruption_component(avg_interruptions: float, weight: float) -> float:
    """Up to *weight* points, falling linearly to 0 at five interruptions per session."""
    return (1 - min(avg_interruptions, 5) / 5) * weight


class AdaptiveSessionsService:
    """
    Usage:
        service = AdaptiveSessionsService(store)
        rec = await service.get_session_recommendations("user-1")
    """

    def __init__(self, store: SessionStore, clock: Clock = system_clock, lookback_days: int = 30):
        self._store = store
        self._clock = clock
        self._lookback_days = lookback_days

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _recent_work_sessions(self, user_id: str) -> List[SessionRecord]:
        since = self._clock() - timedelta(days=self._lookback_days)
        return self._store.query_sessions(user_id, since=since, session_type=SessionType.WORK)

    async def _load(self, user_id: str) -> List[SessionRecord]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._recent_work_sessions, user_id)

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    async def get_session_recommendations(self, user_id: str) -> SessionRecommendation:
        try:
            sessions = await self._load(user_id)
            return recommend_from_sessions(sessions)
        except Exception:
            logger.exception("session_recommendations_failed", user_id=user_id)
            return SessionRecommendation()

    # ------------------------------------------------------------------
    # Focus pattern
    # ------------------------------------------------------------------

    async def get_user_focus_pattern(self, user_id: str) -> UserFocusPattern:
        try:
            sessions = await self._load(user_id)
            return focus_pattern_from_sessions(sessions)
        except Exception:
            logger.exception("focus_pattern_failed", user_id=user_id)
            return UserFocusPattern()


# ---------------------------------------------------------------------------
# Aggregation over an already-fetched session list
# ---------------------------------------------------------------------------

def recommend_from_sessions(sessions: List[SessionRecord]) -> SessionRecommendation:
    completed = [s for s in sessions if s.is_completed]
    avg_interruptions = average_interruptions(sessions)

    if len(sessions) < MIN_SESSIONS_FOR_RECOMMENDATION:
        return SessionRecommendation(
            confidence=min(len(sessions) * 5, 25),
            based_on=RecommendationBasis(
                total_sessions=len(sessions),
                completed_sessions=len(completed),
                average_interruptions=avg_interruptions,
                time_of_day=None,
            ),
        )

    completion_rate = len(completed) / len(sessions) * 100
    durations = [s.duration for s in completed]

    most_common = mode(durations)
    if most_common is not None and most_common[1] >= MIN_MODE_OCCURRENCES:
        work = most_common[0]
    else:
        work = int(clamp(round_to_nearest(mean(durations)), 15, 45))

    short_break = max(3, round_half_up(work / 5))
    long_break = max(10, round_half_up(work / 2))

    confidence = min(
        round_half_up(
            min(len(completed) / 10 * 30, 30)
            + completion_rate / 100 * 40
            + interruption_component(avg_interruptions, 30)
        ),
        100,
    )

    return SessionRecommendation(
        recommended_work_duration=work,
        recommended_short_break_duration=short_break,
        recommended_long_break_duration=long_break,
        confidence=confidence,
        based_on=RecommendationBasis(
            total_sessions=len(sessions),
            completed_sessions=len(completed),
            average_interruptions=avg_interruptions,
            time_of_day=busiest_time_of_day(sessions),
        ),
    )


def busiest_time_of_day(sessions: List[SessionRecord]) -> Optional[str]:
    """Bucket with the most session starts; earlier buckets win ties."""
    counts = [
        (name, sum(1 for s in sessions if in_slot(s.started_at.hour, start, end)))
        for name, start, end in TIME_OF_DAY_BUCKETS
    ]
    name, count = max(counts, key=lambda c: c[1])
    return name if count > 0 else None


def focus_pattern_from_sessions(sessions: List[SessionRecord]) -> UserFocusPattern:
    if not sessions:
        return UserFocusPattern()

    completed = [s for s in sessions if s.is_completed]
    completion_rate = len(completed) / len(sessions) * 100
    avg_interruptions = average_interruptions(sessions)

    # time-of-day slot with the best completion rate (≥3 sessions)
    slot_stats: Dict[str, List[int]] = {name: [0, 0] for name, _, _ in FOCUS_PATTERN_SLOTS}
    for s in sessions:
        for name, start, end in FOCUS_PATTERN_SLOTS:
            if in_slot(s.started_at.hour, start, end):
                slot_stats[name][0] += 1
                slot_stats[name][1] += int(s.is_completed)
                break
    optimal_time = _best_by_rate(slot_stats, min_count=3)

    # weekday with the best completion rate (≥2 sessions)
    day_stats: Dict[str, List[int]] = {day: [0, 0] for day in DAY_NAMES}
    for s in sessions:
        stats = day_stats[weekday_name(s.started_at)]
        stats[0] += 1
        stats[1] += int(s.is_completed)
    best_day = _best_by_rate(day_stats, min_count=2)

    optimal_duration = None
    if len(completed) >= 3:
        most_common = mode([s.duration for s in completed])
        if most_common is not None and most_common[1] >= 2:
            optimal_duration = most_common[0]

    focus_score = round_half_up(
        completion_rate * 0.5
        + interruption_component(avg_interruptions, 30)
        + min(len(sessions) / 20, 1) * 20
    )

    return UserFocusPattern(
        optimal_time_of_day=optimal_time,
        optimal_duration=optimal_duration,
        average_interruptions=avg_interruptions,
        completion_rate=completion_rate,
        most_productive_day=best_day,
        focus_score=focus_score,
    )


def _best_by_rate(stats: Dict[str, List[int]], min_count: int) -> Optional[str]:
    """Key with the highest completed/count ratio among keys with enough samples."""
    eligible = [
        (key, completed / count)
        for key, (count, completed) in stats.items()
        if count >= min_count
    ]
    if not eligible:
        return None
    return max(eligible, key=lambda e: e[1])[0]
