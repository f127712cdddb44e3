"""
Cognitive profile construction from the user's timer settings.

The chronotype flags select one of three fixed (peak, productive, low-energy)
hour sets. Context-switching cost and distraction sensitivity are constants
until there is behavioural data to derive them from.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from .models import Chronotype, CognitiveProfile

# chronotype → (peak, productive, low-energy) hours
CHRONOTYPE_HOURS: Dict[Chronotype, Tuple[List[int], List[int], List[int]]] = {
    Chronotype.EARLY_BIRD: (
        [8, 9, 10, 11],
        [7, 8, 9, 10, 11, 12, 13, 14, 15],
        [16, 17, 18, 19, 20, 21, 22, 23, 0, 1, 2, 3, 4],
    ),
    Chronotype.NIGHT_OWL: (
        [18, 19, 20, 21],
        [15, 16, 17, 18, 19, 20, 21, 22, 23],
        [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
    ),
    Chronotype.INTERMEDIATE: (
        [9, 10, 11, 15, 16],
        [8, 9, 10, 11, 14, 15, 16, 17],
        [12, 13, 21, 22, 23, 0, 1, 2, 3, 4, 5],
    ),
}

DEFAULT_CONTEXT_SWITCHING_COST = 5
DEFAULT_DISTRACTION_SENSITIVITY = 5


def _read(settings: Any, key: str, default: Any) -> Any:
    if isinstance(settings, Mapping):
        return settings.get(key, default)
    return getattr(settings, key, default)


def profile_for(
    chronotype: Chronotype,
    focus_session_duration: int = 25,
    break_duration: int = 5,
) -> CognitiveProfile:
    peak, productive, low = CHRONOTYPE_HOURS[chronotype]
    return CognitiveProfile(
        chronotype=chronotype,
        peak_hours=list(peak),
        productive_hours=list(productive),
        low_energy_hours=list(low),
        focus_session_duration=focus_session_duration,
        break_duration=break_duration,
        context_switching_cost=DEFAULT_CONTEXT_SWITCHING_COST,
        distraction_sensitivity=DEFAULT_DISTRACTION_SENSITIVITY,
    )


def default_profile() -> CognitiveProfile:
    return profile_for(Chronotype.INTERMEDIATE)


def create_cognitive_profile(timer_settings: Any) -> CognitiveProfile:
    """
    Build a profile from resolved timer settings: either the settings dict
    from focusplan.settings or any object exposing the same attributes.
    """
    if _read(timer_settings, "early_bird_mode", False):
        chronotype = Chronotype.EARLY_BIRD
    elif _read(timer_settings, "night_owl_mode", False):
        chronotype = Chronotype.NIGHT_OWL
    else:
        chronotype = Chronotype.INTERMEDIATE

    return profile_for(
        chronotype,
        focus_session_duration=_read(timer_settings, "pomodoro_duration", 25),
        break_duration=_read(timer_settings, "short_break_duration", 5),
    )
