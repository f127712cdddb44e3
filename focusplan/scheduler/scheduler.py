"""
Cognitive Task Scheduler — places tasks into a day's time blocks, matching
each task's ideal energy level to the energy the profile predicts.

Greedy, no backtracking:
  1. enrich every task with complexity / load type / energy / duration
  2. order by priority (high first), then complexity (high first)
  3. for each task, pick the best-scoring contiguous run of free blocks
     and consume it; tasks that do not fit are dropped
"""

from __future__ import annotations

import dataclasses
import math
from datetime import date, datetime
from typing import Any, Iterable, List, Sequence, Set, Tuple, Union

from ..logging_config import get_logger
from .classifier import (
    determine_cognitive_load_type,
    determine_ideal_energy_level,
    estimate_task_complexity,
)
from .models import (
    CalendarEvent,
    CognitiveProfile,
    CognitiveTask,
    Complexity,
    EnergyLevel,
    Priority,
    ScheduledTask,
    Task,
    TimeBlock,
)
from .profile import create_cognitive_profile
from .time_blocks import BLOCK_MINUTES, DEFAULT_END_HOUR, DEFAULT_START_HOUR, generate_time_blocks

logger = get_logger(__name__)

MINUTES_PER_POMODORO = 25

DEFAULT_DURATION_BY_COMPLEXITY = {
    Complexity.HIGH: 60,
    Complexity.MEDIUM: 45,
    Complexity.LOW: 25,
}

_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}
_COMPLEXITY_RANK = {Complexity.HIGH: 0, Complexity.MEDIUM: 1, Complexity.LOW: 2}

# energy levels that earn partial credit for a task's ideal level
_ADJACENT_ENERGY = {
    EnergyLevel.HIGH: {EnergyLevel.MEDIUM},
    EnergyLevel.MEDIUM: {EnergyLevel.HIGH, EnergyLevel.LOW},
    EnergyLevel.LOW: {EnergyLevel.MEDIUM},
}


def enrich_task(task: Task) -> CognitiveTask:
    """Return a CognitiveTask copy of *task*; fields already set are kept."""
    if isinstance(task, CognitiveTask):
        enriched = dataclasses.replace(task)
    else:
        enriched = CognitiveTask(
            **{f.name: getattr(task, f.name) for f in dataclasses.fields(Task)}
        )

    if not enriched.complexity:
        enriched.complexity = estimate_task_complexity(task)
    if not enriched.cognitive_load_type:
        enriched.cognitive_load_type = determine_cognitive_load_type(task)
    if not enriched.ideal_energy_level:
        enriched.ideal_energy_level = determine_ideal_energy_level(enriched)

    if not enriched.estimated_duration:
        if enriched.estimated_pomodoros:
            enriched.estimated_duration = enriched.estimated_pomodoros * MINUTES_PER_POMODORO
        else:
            enriched.estimated_duration = DEFAULT_DURATION_BY_COMPLEXITY.get(
                enriched.complexity, BLOCK_MINUTES
            )
    return enriched


def _sort_key(task: CognitiveTask):
    return (
        _PRIORITY_RANK.get(task.priority, len(_PRIORITY_RANK)),
        _COMPLEXITY_RANK.get(task.complexity, _COMPLEXITY_RANK[Complexity.MEDIUM]),
    )


def _energy_score(blocks: Sequence[TimeBlock], ideal: EnergyLevel) -> int:
    score = 0
    for block in blocks:
        if block.energy_level == ideal:
            score += 3
        elif block.energy_level in _ADJACENT_ENERGY[ideal]:
            score += 1
    return score


def _run_from(
    blocks: Sequence[TimeBlock], start: int, needed: int, used: Set[int]
) -> List[int]:
    """Indices of the contiguous free run starting at *start*, at most *needed* long."""
    run = [start]
    for i in range(start + 1, min(start + needed, len(blocks))):
        if i in used or blocks[i].start_time != blocks[run[-1]].end_time:
            break
        run.append(i)
    return run


def schedule_tasks(
    tasks: Iterable[Task],
    time_blocks: Sequence[TimeBlock],
) -> List[ScheduledTask]:
    """
    Assign each task the best-matching run of consecutive free blocks.

    Only the first block of a run is reported as the assignment, but the whole
    run is consumed. Tasks for which no full-length run remains are omitted.
    """
    ordered = sorted((enrich_task(t) for t in tasks), key=_sort_key)
    available = [b for b in time_blocks if b.available]
    used: Set[int] = set()
    scheduled: List[ScheduledTask] = []

    for task in ordered:
        ideal = task.ideal_energy_level or EnergyLevel.MEDIUM
        needed = math.ceil((task.estimated_duration or BLOCK_MINUTES) / BLOCK_MINUTES)

        best: List[int] = []
        best_score = -1
        for i in range(len(available)):
            if i in used:
                continue
            run = _run_from(available, i, needed, used)
            if len(run) != needed:
                continue
            score = _energy_score([available[j] for j in run], ideal)
            if score > best_score:
                best, best_score = run, score

        if not best:
            logger.debug("task_not_scheduled", task_id=task.id, blocks_needed=needed)
            continue

        used.update(best)
        run_blocks = [available[j] for j in best]
        scheduled.append(ScheduledTask(
            task=task,
            time_block=run_blocks[0],
            block_count=len(run_blocks),
            blocks=run_blocks,
        ))

    logger.info(
        "schedule_built",
        tasks=len(ordered),
        scheduled=len(scheduled),
        free_blocks=len(available) - len(used),
    )
    return scheduled


def plan_day(
    tasks: Iterable[Task],
    day: Union[date, datetime],
    timer_settings: Any,
    existing_events: Iterable[CalendarEvent] = (),
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
) -> Tuple[CognitiveProfile, List[TimeBlock], List[ScheduledTask]]:
    """Profile → blocks → schedule in one call. Returns (profile, blocks, schedule)."""
    profile = create_cognitive_profile(timer_settings)
    blocks = generate_time_blocks(day, profile, existing_events, start_hour, end_hour)
    return profile, blocks, schedule_tasks(tasks, blocks)
