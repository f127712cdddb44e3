"""
Productivity Insights — condenses daily analytics into patterns, then maps
those patterns onto human-readable insights through a fixed rule table.

Deterministic rules, not a learned model: each InsightRule pairs a predicate
over (patterns, daily analytics) with the insight it produces.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from ..clock import DAY_NAMES, Clock, system_clock, weekday_index
from ..logging_config import get_logger
from .stats import round_half_up
from .store import DailyAnalytics, ProductivityByHour, SessionStore

logger = get_logger(__name__)

DEFAULT_SESSION_LENGTH = 25
WEEKDAYS = [1, 2, 3, 4, 5]


@dataclass
class ProductivityPatterns:
    most_productive_hours: List[int] = field(default_factory=list)
    most_productive_days: List[int] = field(default_factory=lambda: list(WEEKDAYS))  # 0 = Sunday
    average_session_length: int = DEFAULT_SESSION_LENGTH
    optimal_session_length: int = DEFAULT_SESSION_LENGTH
    focus_score_trend: str = "stable"            # increasing | decreasing | stable
    task_completion_rate: int = 0                # 0-100
    consistency_score: int = 0                   # 0-100
    interruption_rate: int = 0                   # % of sessions not completed


@dataclass
class AIInsight:
    type: str                 # tip | observation | recommendation | achievement
    title: str
    description: str
    priority: str             # high | medium | low
    category: str             # focus | tasks | habits | time | general
    actionable: bool
    action: Optional[str] = None


# ---------------------------------------------------------------------------
# Pattern analysis
# ---------------------------------------------------------------------------

def analyze_productivity_patterns(
    daily: Sequence[DailyAnalytics],
    by_hour: Sequence[ProductivityByHour],
) -> ProductivityPatterns:
    patterns = ProductivityPatterns()
    if not daily:
        return patterns

    # top three hours by focused minutes
    if by_hour:
        ranked_hours = sorted(by_hour, key=lambda h: h.total_minutes, reverse=True)
        patterns.most_productive_hours = [h.hour for h in ranked_hours[:3]]

    # top three weekdays by focused minutes
    minutes_by_day = [0] * 7
    for d in daily:
        minutes_by_day[weekday_index(d.date)] += d.total_work_minutes
    ranked_days = sorted(range(7), key=lambda i: minutes_by_day[i], reverse=True)
    ranked_days = [i for i in ranked_days if minutes_by_day[i] > 0]
    if ranked_days:
        patterns.most_productive_days = ranked_days[:3]

    total_sessions = sum(d.completed_work_sessions for d in daily)
    total_minutes = sum(d.total_work_minutes for d in daily)
    if total_sessions > 0:
        patterns.average_session_length = round_half_up(total_minutes / total_sessions)

    patterns.optimal_session_length = _optimal_session_length(daily)
    patterns.focus_score_trend = _focus_score_trend(daily)

    total_tasks = sum(d.completed_tasks for d in daily)
    if total_sessions > 0:
        patterns.task_completion_rate = min(100, round_half_up(total_tasks / total_sessions * 100))

    active_days = sum(1 for d in daily if d.completed_work_sessions > 0)
    patterns.consistency_score = round_half_up(active_days / len(daily) * 100)

    # sessions that were not completed count as interrupted
    attempted = sum(d.total_work_sessions for d in daily)
    if attempted > 0:
        patterns.interruption_rate = round_half_up((attempted - total_sessions) / attempted * 100)

    return patterns


def _optimal_session_length(daily: Sequence[DailyAnalytics]) -> int:
    """Rounded daily session length with the best mean focus score over ≥3 days."""
    groups: Dict[int, List[int]] = {}
    for d in daily:
        if d.completed_work_sessions > 0:
            length = round_half_up(d.total_work_minutes / d.completed_work_sessions)
            rounded = round_half_up(length / 5) * 5
            groups.setdefault(rounded, []).append(d.focus_score)

    best_length, best_score = DEFAULT_SESSION_LENGTH, 0.0
    for length in sorted(groups):
        scores = groups[length]
        avg = sum(scores) / len(scores)
        if avg > best_score and len(scores) >= 3:
            best_length, best_score = length, avg
    return best_length


def _focus_score_trend(daily: Sequence[DailyAnalytics]) -> str:
    if len(daily) < 7:
        return "stable"
    last_week = [d.focus_score for d in daily[-7:]]
    first = sum(last_week[:3]) / 3
    second = sum(last_week[-3:]) / 3
    difference = second - first
    if difference > 5:
        return "increasing"
    if difference < -5:
        return "decreasing"
    return "stable"


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

def _format_hour(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour == 12:
        return "12 PM"
    return f"{hour} AM" if hour < 12 else f"{hour - 12} PM"


def _day_list(p: ProductivityPatterns) -> str:
    return ", ".join(DAY_NAMES[d] for d in p.most_productive_days)


@dataclass
class InsightRule:
    applies: Callable[[ProductivityPatterns, Sequence[DailyAnalytics]], bool]
    build: Callable[[ProductivityPatterns], AIInsight]
    description: str = ""


RULES: List[InsightRule] = [

    # ── FOCUS TREND ────────────────────────────────────────────────────────
    InsightRule(
        description="Focus score rising",
        applies=lambda p, d: p.focus_score_trend == "increasing",
        build=lambda p: AIInsight(
            "achievement", "Focus Improvement",
            "Your focus score is trending upward. Keep up the good work!",
            "medium", "focus", False,
        ),
    ),
    InsightRule(
        description="Focus score falling",
        applies=lambda p, d: p.focus_score_trend == "decreasing",
        build=lambda p: AIInsight(
            "observation", "Focus Decline",
            "Your focus score has been decreasing recently. Consider reviewing "
            "your work environment for potential distractions.",
            "high", "focus", True,
            "Review your work environment and eliminate distractions",
        ),
    ),

    # ── SESSION LENGTH ─────────────────────────────────────────────────────
    InsightRule(
        description="Non-standard session length works best",
        applies=lambda p, d: p.optimal_session_length != DEFAULT_SESSION_LENGTH,
        build=lambda p: AIInsight(
            "recommendation", "Optimal Session Length",
            f"Your data suggests that {p.optimal_session_length}-minute focus sessions "
            "are most effective for you. Consider adjusting your timer settings.",
            "medium", "focus", True,
            f"Set your focus timer to {p.optimal_session_length} minutes",
        ),
    ),

    # ── PEAK HOURS ─────────────────────────────────────────────────────────
    InsightRule(
        description="Known peak hours",
        applies=lambda p, d: bool(p.most_productive_hours),
        build=lambda p: AIInsight(
            "recommendation", "Peak Productivity Hours",
            "You tend to be most productive around "
            f"{', '.join(_format_hour(h) for h in p.most_productive_hours)}. "
            "Schedule your most important tasks during these times.",
            "high", "time", True,
            "Schedule important tasks during your peak productivity hours",
        ),
    ),

    # ── CONSISTENCY ────────────────────────────────────────────────────────
    InsightRule(
        description="Irregular schedule",
        applies=lambda p, d: p.consistency_score < 50,
        build=lambda p: AIInsight(
            "recommendation", "Improve Consistency",
            "Your focus sessions are inconsistent. Establishing a regular schedule "
            "can help build better habits.",
            "high", "habits", True,
            "Set a regular schedule for your focus sessions",
        ),
    ),
    InsightRule(
        description="Regular schedule",
        applies=lambda p, d: p.consistency_score >= 80,
        build=lambda p: AIInsight(
            "achievement", "Consistent Habits",
            "You've established a consistent focus routine. This is excellent for "
            "long-term productivity!",
            "low", "habits", False,
        ),
    ),

    # ── INTERRUPTIONS ──────────────────────────────────────────────────────
    InsightRule(
        description="Frequent interruptions",
        applies=lambda p, d: p.interruption_rate > 30,
        build=lambda p: AIInsight(
            "recommendation", "Reduce Interruptions",
            f"{p.interruption_rate}% of your sessions are interrupted. Try using "
            "Do Not Disturb mode or finding a quieter workspace.",
            "high", "focus", True,
            "Enable Do Not Disturb mode during focus sessions",
        ),
    ),

    # ── TASK COMPLETION ────────────────────────────────────────────────────
    InsightRule(
        description="Tasks rarely finished",
        applies=lambda p, d: p.task_completion_rate < 50,
        build=lambda p: AIInsight(
            "recommendation", "Task Sizing",
            "Your task completion rate is low. Consider breaking down tasks into "
            "smaller, more manageable pieces.",
            "medium", "tasks", True,
            "Break down large tasks into smaller subtasks",
        ),
    ),
    InsightRule(
        description="Tasks reliably finished",
        applies=lambda p, d: p.task_completion_rate > 90,
        build=lambda p: AIInsight(
            "achievement", "Excellent Task Completion",
            "You're completing tasks at an impressive rate. Your task sizing is effective!",
            "low", "tasks", False,
        ),
    ),

    # ── PRODUCTIVE DAYS ────────────────────────────────────────────────────
    InsightRule(
        description="Known productive weekdays",
        applies=lambda p, d: bool(p.most_productive_days),
        build=lambda p: AIInsight(
            "observation", "Productive Days",
            f"You tend to be most productive on {_day_list(p)}. Consider scheduling "
            "your most important work on these days.",
            "medium", "time", True,
            f"Schedule important work on {_day_list(p)}",
        ),
    ),

    # ── DATA VOLUME ────────────────────────────────────────────────────────
    InsightRule(
        description="Less than two weeks of history",
        applies=lambda p, d: len(d) < 14,
        build=lambda p: AIInsight(
            "tip", "Building Your Profile",
            "Keep using the app to get more personalized insights. We need at least "
            "2 weeks of data for the most accurate recommendations.",
            "low", "general", False,
        ),
    ),
]

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def generate_ai_insights(
    patterns: ProductivityPatterns,
    daily: Sequence[DailyAnalytics],
) -> List[AIInsight]:
    """Evaluate every rule; return the produced insights, high priority first."""
    insights = [rule.build(patterns) for rule in RULES if rule.applies(patterns, daily)]
    insights.sort(key=lambda i: _PRIORITY_ORDER[i.priority])
    return insights


def get_ai_insights(
    daily: Sequence[DailyAnalytics],
    by_hour: Sequence[ProductivityByHour],
) -> List[AIInsight]:
    return generate_ai_insights(analyze_productivity_patterns(daily, by_hour), daily)


# ---------------------------------------------------------------------------
# Store-backed entry point
# ---------------------------------------------------------------------------

@dataclass
class InsightsReport:
    insights: List[AIInsight]
    patterns: ProductivityPatterns
    data_points: int
    start: datetime
    end: datetime


class InsightsService:

    def __init__(self, store: SessionStore, clock: Clock = system_clock):
        self._store = store
        self._clock = clock

    def _build(self, user_id: str, days: int) -> InsightsReport:
        end = self._clock()
        start = end - timedelta(days=days)
        daily = self._store.daily_analytics(user_id, since=start, until=end)
        by_hour = self._store.productivity_by_hour(user_id, since=start, until=end)
        patterns = analyze_productivity_patterns(daily, by_hour)
        return InsightsReport(
            insights=generate_ai_insights(patterns, daily),
            patterns=patterns,
            data_points=len(daily),
            start=start,
            end=end,
        )

    async def get_insights(self, user_id: str, days: int = 30) -> InsightsReport:
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self._build, user_id, days)
        except Exception:
            logger.exception("insights_failed", user_id=user_id, days=days)
            end = self._clock()
            return InsightsReport(
                insights=[],
                patterns=ProductivityPatterns(),
                data_points=0,
                start=end - timedelta(days=days),
                end=end,
            )

    async def get_daily_analytics(self, user_id: str, days: int = 7) -> List[DailyAnalytics]:
        try:
            end = self._clock()
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                None, self._store.daily_analytics, user_id, end - timedelta(days=days), end
            )
        except Exception:
            logger.exception("daily_analytics_failed", user_id=user_id, days=days)
            return []
