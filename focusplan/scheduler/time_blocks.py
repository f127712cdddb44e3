"""
Time Block Generator — splits a working day into contiguous 30-minute blocks
and labels each with the energy level the profile predicts for its hour.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

from .models import CalendarEvent, CognitiveProfile, TimeBlock
from .profile import default_profile

BLOCK_MINUTES = 30
DEFAULT_START_HOUR = 8
DEFAULT_END_HOUR = 18


def _overlaps(start: datetime, end: datetime, event: CalendarEvent) -> bool:
    return start < event.end and end > event.start


def generate_time_blocks(
    day: Union[date, datetime],
    profile: Optional[CognitiveProfile] = None,
    existing_events: Iterable[CalendarEvent] = (),
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
) -> List[TimeBlock]:
    """
    Return 2 × (end_hour − start_hour) blocks covering [start_hour, end_hour)
    on *day*, ordered by start time. Blocks that overlap any event in
    *existing_events* are marked unavailable.
    """
    profile = profile or default_profile()
    events = list(existing_events)
    midnight = datetime(day.year, day.month, day.day)

    blocks: List[TimeBlock] = []
    for hour in range(start_hour, end_hour):
        for minute in range(0, 60, BLOCK_MINUTES):
            start = midnight + timedelta(hours=hour, minutes=minute)
            end = start + timedelta(minutes=BLOCK_MINUTES)
            blocks.append(TimeBlock(
                start_time=start,
                end_time=end,
                energy_level=profile.energy_at(hour),
                available=not any(_overlaps(start, end, e) for e in events),
            ))
    return blocks
