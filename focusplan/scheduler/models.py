"""
Scheduling data model — task records consumed from the task store, and the
ephemeral cognitive metadata, time blocks and profiles derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CognitiveLoadType(str, Enum):
    FOCUS = "focus"
    CREATIVITY = "creativity"
    DECISION_MAKING = "decision-making"
    LEARNING = "learning"
    ROUTINE = "routine"


class EnergyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Chronotype(str, Enum):
    EARLY_BIRD = "early-bird"
    NIGHT_OWL = "night-owl"
    INTERMEDIATE = "intermediate"


@dataclass
class Task:
    id: str
    title: str
    description: Optional[str] = None
    priority: Optional[Priority] = None
    status: TaskStatus = TaskStatus.PENDING
    estimated_pomodoros: Optional[int] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = None


@dataclass
class CognitiveTask(Task):
    """A Task plus derived cognitive metadata. Rebuilt for every scheduling run."""
    complexity: Optional[Complexity] = None
    cognitive_load_type: Optional[CognitiveLoadType] = None
    ideal_energy_level: Optional[EnergyLevel] = None
    estimated_duration: Optional[int] = None    # minutes


@dataclass
class TimeBlock:
    start_time: datetime
    end_time: datetime
    energy_level: EnergyLevel
    available: bool = True


@dataclass
class CalendarEvent:
    """An existing commitment; blocks overlapping it are unavailable."""
    start: datetime
    end: datetime


@dataclass
class CognitiveProfile:
    chronotype: Chronotype
    peak_hours: List[int]                # 0-23, highest energy
    productive_hours: List[int]          # 0-23, generally productive
    low_energy_hours: List[int]          # 0-23, lowest energy
    focus_session_duration: int = 25     # minutes
    break_duration: int = 5              # minutes
    context_switching_cost: int = 5      # 1-10, not yet personalised
    distraction_sensitivity: int = 5     # 1-10, not yet personalised

    def energy_at(self, hour: int) -> EnergyLevel:
        if hour in self.peak_hours:
            return EnergyLevel.HIGH
        if hour in self.productive_hours:
            return EnergyLevel.MEDIUM
        if hour in self.low_energy_hours:
            return EnergyLevel.LOW
        return EnergyLevel.MEDIUM


@dataclass
class ScheduledTask:
    task: CognitiveTask
    time_block: TimeBlock                # first block of the consumed run
    block_count: int = 1
    blocks: List[TimeBlock] = field(default_factory=list, repr=False)
