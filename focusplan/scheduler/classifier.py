"""
Task Classifier — derives cognitive metadata from a plain task record.

Three rule-based heuristics (v1, bag-of-words, no trained model):
  complexity         ← additive score over effort, priority, description
                       length and complexity keywords in the title
  cognitive load     ← keyword hits per load category in title + description
  ideal energy level ← decision table over (complexity, load type)

All functions are pure: the same task always yields the same result.
"""

from __future__ import annotations

from typing import Dict, List

from .models import (
    CognitiveLoadType,
    CognitiveTask,
    Complexity,
    EnergyLevel,
    Priority,
    Task,
)

COMPLEXITY_KEYWORDS: List[str] = [
    "analyze",
    "research",
    "develop",
    "create",
    "design",
    "complex",
    "difficult",
    "challenging",
    "strategic",
    "plan",
    "architecture",
    "framework",
    "system",
    "algorithm",
]

# Dict order is the tie-break order when scanning for the dominant category
LOAD_TYPE_KEYWORDS: Dict[CognitiveLoadType, List[str]] = {
    CognitiveLoadType.FOCUS: [
        "analyze", "study", "review", "read", "research",
        "concentrate", "examine", "investigate", "debug",
    ],
    CognitiveLoadType.CREATIVITY: [
        "create", "design", "brainstorm", "innovate", "develop",
        "imagine", "generate", "ideate", "visualize",
    ],
    CognitiveLoadType.DECISION_MAKING: [
        "decide", "choose", "evaluate", "assess", "select",
        "prioritize", "judge", "determine", "plan", "strategy",
    ],
    CognitiveLoadType.LEARNING: [
        "learn", "study", "understand", "practice", "master",
        "comprehend", "absorb", "grasp", "familiarize",
    ],
    CognitiveLoadType.ROUTINE: [
        "update", "maintain", "check", "organize", "clean",
        "arrange", "file", "sort", "routine", "regular",
    ],
}

CREATIVE_CATEGORIES = {"design", "content", "marketing", "creative"}

_PRIORITY_POINTS = {Priority.HIGH: 2, Priority.MEDIUM: 1, Priority.LOW: 0}


def estimate_task_complexity(task: Task) -> Complexity:
    score = 0

    # effort
    if task.estimated_pomodoros:
        if task.estimated_pomodoros >= 5:
            score += 3
        elif task.estimated_pomodoros >= 3:
            score += 2
        else:
            score += 1

    score += _PRIORITY_POINTS.get(task.priority, 0)

    # description length in words
    if task.description:
        words = len(task.description.split())
        if words > 100:
            score += 2
        elif words > 50:
            score += 1

    # every keyword found in the title counts once
    if task.title:
        title = task.title.lower()
        score += sum(1 for keyword in COMPLEXITY_KEYWORDS if keyword in title)

    if score >= 5:
        return Complexity.HIGH
    if score >= 3:
        return Complexity.MEDIUM
    return Complexity.LOW


def determine_cognitive_load_type(task: Task) -> CognitiveLoadType:
    text = f"{task.title or ''} {task.description or ''}".lower()

    counts = [
        (load_type, sum(1 for keyword in keywords if keyword in text))
        for load_type, keywords in LOAD_TYPE_KEYWORDS.items()
    ]
    # stable: equal counts keep table order
    counts.sort(key=lambda c: c[1], reverse=True)

    top_type, top_count = counts[0]
    if top_count > 0 and top_count != counts[1][1]:
        return top_type

    # no signal or a tie: fall back to task metadata
    if task.estimated_pomodoros and task.estimated_pomodoros <= 1:
        return CognitiveLoadType.ROUTINE
    if task.priority == Priority.HIGH:
        return CognitiveLoadType.FOCUS
    if task.category and task.category.lower() in CREATIVE_CATEGORIES:
        return CognitiveLoadType.CREATIVITY
    return CognitiveLoadType.FOCUS


def determine_ideal_energy_level(task: CognitiveTask) -> EnergyLevel:
    if task.complexity == Complexity.HIGH:
        return EnergyLevel.HIGH

    if task.complexity == Complexity.MEDIUM:
        if task.cognitive_load_type in (
            CognitiveLoadType.FOCUS,
            CognitiveLoadType.DECISION_MAKING,
            CognitiveLoadType.LEARNING,
        ):
            return EnergyLevel.HIGH
        return EnergyLevel.MEDIUM

    if task.cognitive_load_type == CognitiveLoadType.ROUTINE:
        return EnergyLevel.LOW
    return EnergyLevel.MEDIUM
