"""
Small numeric helpers shared by the analytics services.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np


def round_half_up(value: float) -> int:
    """Round .5 upward (12.5 → 13); round() would give 12."""
    return int(math.floor(value + 0.5))


def mean(values: Sequence[float], default: float = 0.0) -> float:
    if len(values) == 0:
        return default
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def mode(values: Sequence[int]) -> Optional[Tuple[int, int]]:
    """
    Most frequent value and its count, or None for an empty sequence.
    Ties go to the smallest value.
    """
    if len(values) == 0:
        return None
    uniques, counts = np.unique(np.asarray(values, dtype=np.int64), return_counts=True)
    idx = int(np.argmax(counts))
    return int(uniques[idx]), int(counts[idx])


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_to_nearest(value: float, step: int = 5) -> int:
    return round_half_up(value / step) * step
