"""
/schedule — classify tasks and plan a working day against the energy profile.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from ...api.schemas import (
    CognitiveProfileOut,
    CognitiveTaskOut,
    ScheduledTaskOut,
    ScheduleOut,
    ScheduleRequest,
    TaskIn,
    TimeBlockOut,
)
from ...clock import to_local
from ...config import config
from ...scheduler.models import (
    CalendarEvent,
    CognitiveProfile,
    CognitiveTask,
    Priority,
    Task,
    TaskStatus,
    TimeBlock,
)
from ...scheduler.profile import create_cognitive_profile
from ...scheduler.scheduler import enrich_task, plan_day
from ...scheduler.time_blocks import generate_time_blocks
from ...settings import get_settings

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _today(request: Request) -> date:
    return request.app.state.clock().date()


def _to_task(t: TaskIn) -> Task:
    return Task(
        id=t.id,
        title=t.title,
        description=t.description,
        priority=Priority(t.priority) if t.priority else None,
        status=TaskStatus(t.status),
        estimated_pomodoros=t.estimated_pomodoros,
        category=t.category,
        due_date=t.due_date,
    )


def _task_out(t: CognitiveTask) -> CognitiveTaskOut:
    return CognitiveTaskOut(
        id=t.id,
        title=t.title,
        priority=t.priority.value if t.priority else None,
        complexity=t.complexity.value,
        cognitive_load_type=t.cognitive_load_type.value,
        ideal_energy_level=t.ideal_energy_level.value,
        estimated_duration=t.estimated_duration,
    )


def _block_out(b: TimeBlock) -> TimeBlockOut:
    return TimeBlockOut(
        start_time=b.start_time,
        end_time=b.end_time,
        energy_level=b.energy_level.value,
        available=b.available,
    )


def _profile_out(p: CognitiveProfile) -> CognitiveProfileOut:
    return CognitiveProfileOut(
        chronotype=p.chronotype.value,
        peak_hours=p.peak_hours,
        productive_hours=p.productive_hours,
        low_energy_hours=p.low_energy_hours,
        focus_session_duration=p.focus_session_duration,
        break_duration=p.break_duration,
        context_switching_cost=p.context_switching_cost,
        distraction_sensitivity=p.distraction_sensitivity,
    )


@router.post("", response_model=ScheduleOut)
def build_schedule(req: ScheduleRequest, today: date = Depends(_today)):
    """Plan the given tasks into the day's time blocks."""
    day = req.date or today
    timer = req.settings.model_dump() if req.settings else get_settings()
    tasks = [_to_task(t) for t in req.tasks]
    events = [CalendarEvent(start=to_local(e.start), end=to_local(e.end)) for e in req.existing_events]

    profile, blocks, scheduled = plan_day(
        tasks, day, timer, events,
        start_hour=config.workday_start_hour,
        end_hour=config.workday_end_hour,
    )
    placed = {s.task.id for s in scheduled}

    return ScheduleOut(
        date=day,
        profile=_profile_out(profile),
        scheduled=[
            ScheduledTaskOut(
                task=_task_out(s.task),
                time_block=_block_out(s.time_block),
                block_count=s.block_count,
            )
            for s in scheduled
        ],
        unscheduled_task_ids=[t.id for t in tasks if t.id not in placed],
        time_blocks=[_block_out(b) for b in blocks],
    )


@router.post("/classify", response_model=CognitiveTaskOut)
def classify_task(task: TaskIn):
    """Return the cognitive metadata the scheduler would derive for *task*."""
    return _task_out(enrich_task(_to_task(task)))


@router.get("/blocks", response_model=List[TimeBlockOut])
def get_blocks(
    day: Optional[date] = Query(default=None, description="Defaults to today"),
    today: date = Depends(_today),
):
    profile = create_cognitive_profile(get_settings())
    blocks = generate_time_blocks(
        day or today, profile,
        start_hour=config.workday_start_hour,
        end_hour=config.workday_end_hour,
    )
    return [_block_out(b) for b in blocks]


@router.get("/profile", response_model=CognitiveProfileOut)
def get_profile():
    """Cognitive profile derived from the stored timer settings."""
    return _profile_out(create_cognitive_profile(get_settings()))
