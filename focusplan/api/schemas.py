"""
Pydantic schemas for the FastAPI local API.
"""

from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# ── Tasks & Scheduling ─────────────────────────────────────────────────────

class TaskIn(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: Optional[str] = Field(None, pattern="^(low|medium|high)$")
    status: str = Field("pending", pattern="^(pending|in_progress|completed|cancelled)$")
    estimated_pomodoros: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None
    due_date: Optional[datetime] = None


class CalendarEventIn(BaseModel):
    start: datetime
    end: datetime


class TimerSettingsIn(BaseModel):
    pomodoro_duration: int = Field(25, ge=1, le=180)
    short_break_duration: int = Field(5, ge=1, le=60)
    early_bird_mode: bool = False
    night_owl_mode: bool = False


class ScheduleRequest(BaseModel):
    tasks: List[TaskIn]
    date: Optional[dt.date] = None
    existing_events: List[CalendarEventIn] = Field(default_factory=list)
    settings: Optional[TimerSettingsIn] = Field(
        None, description="Overrides the stored timer settings for this request"
    )

    @field_validator("tasks")
    @classmethod
    def unique_task_ids(cls, tasks: List[TaskIn]) -> List[TaskIn]:
        seen = set()
        for task in tasks:
            if task.id in seen:
                raise ValueError(f"duplicate task id: {task.id}")
            seen.add(task.id)
        return tasks


class CognitiveTaskOut(BaseModel):
    id: str
    title: str
    priority: Optional[str]
    complexity: str
    cognitive_load_type: str
    ideal_energy_level: str
    estimated_duration: int


class TimeBlockOut(BaseModel):
    start_time: datetime
    end_time: datetime
    energy_level: str
    available: bool


class ScheduledTaskOut(BaseModel):
    task: CognitiveTaskOut
    time_block: TimeBlockOut
    block_count: int


class CognitiveProfileOut(BaseModel):
    chronotype: str
    peak_hours: List[int]
    productive_hours: List[int]
    low_energy_hours: List[int]
    focus_session_duration: int
    break_duration: int
    context_switching_cost: int
    distraction_sensitivity: int


class ScheduleOut(BaseModel):
    date: dt.date
    profile: CognitiveProfileOut
    scheduled: List[ScheduledTaskOut]
    unscheduled_task_ids: List[str]
    time_blocks: List[TimeBlockOut]


# ── Session History ────────────────────────────────────────────────────────

class SessionIn(BaseModel):
    user_id: str
    type: str = Field(..., pattern="^(work|short_break|long_break)$")
    duration: int = Field(..., ge=1, description="Planned length in minutes")
    started_at: datetime
    completed_at: Optional[datetime] = None
    is_completed: bool = False
    was_interrupted: bool = False
    interruption_count: int = Field(0, ge=0)


class SessionOut(SessionIn):
    id: int


class TaskStatusIn(BaseModel):
    id: str
    user_id: str
    status: str = Field(..., pattern="^(pending|in_progress|completed|cancelled)$")
    updated_at: Optional[datetime] = None


# ── Analytics ──────────────────────────────────────────────────────────────

class RecommendationBasisOut(BaseModel):
    total_sessions: int
    completed_sessions: int
    average_interruptions: float
    time_of_day: Optional[str]


class SessionRecommendationOut(BaseModel):
    recommended_work_duration: int
    recommended_short_break_duration: int
    recommended_long_break_duration: int
    confidence: int = Field(..., ge=0, le=100)
    based_on: RecommendationBasisOut


class UserFocusPatternOut(BaseModel):
    optimal_time_of_day: Optional[str]
    optimal_duration: Optional[int]
    average_interruptions: float
    completion_rate: float
    most_productive_day: Optional[str]
    focus_score: int


class FocusMetricsOut(BaseModel):
    focus_score: int
    completed_sessions: int
    total_focus_time: int
    average_session_length: int
    streak: int
    most_productive_time: str
    completed_tasks: int
    interruption_rate: float
    focus_trend: str
    recommended_session_length: int
    recommended_break_length: int


class DailyAnalyticsOut(BaseModel):
    date: dt.date
    total_work_sessions: int
    completed_work_sessions: int
    total_work_minutes: int
    total_break_minutes: int
    focus_score: int
    completed_tasks: int


class AIInsightOut(BaseModel):
    type: str
    title: str
    description: str
    priority: str
    category: str
    actionable: bool
    action: Optional[str] = None


class ProductivityPatternsOut(BaseModel):
    most_productive_hours: List[int]
    most_productive_days: List[int]
    average_session_length: int
    optimal_session_length: int
    focus_score_trend: str
    task_completion_rate: int
    consistency_score: int
    interruption_rate: int


class InsightsOut(BaseModel):
    insights: List[AIInsightOut]
    patterns: ProductivityPatternsOut
    data_points: int
    start: datetime
    end: datetime
    days: int
