"""
User timer settings — persisted to data/settings.json.

Import get_settings() anywhere in the service to read current values.
Import update_settings(patch) to mutate and save.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .config import config
from .logging_config import get_logger

logger = get_logger(__name__)

_FILE: Path = config.data_dir / "settings.json"

DEFAULTS: dict[str, Any] = {
    "pomodoro_duration":    25,      # minutes
    "short_break_duration": 5,       # minutes
    "long_break_duration":  15,      # minutes
    "early_bird_mode":      False,   # chronotype flags, early bird wins if both set
    "night_owl_mode":       False,
}

_current: dict[str, Any] = {}


def _coerce(key: str, value: Any) -> Any:
    default = DEFAULTS[key]
    if isinstance(default, bool) and isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return type(default)(value)


def _load() -> None:
    global _current
    _current = dict(DEFAULTS)
    if _FILE.exists():
        try:
            saved = json.loads(_FILE.read_text())
            for k, v in saved.items():
                if k in DEFAULTS:
                    # coerce to the same type as the default
                    _current[k] = _coerce(k, v)
        except (ValueError, TypeError, OSError) as exc:
            logger.warning("settings_file_unreadable", path=str(_FILE), error=str(exc))


def get_settings() -> dict[str, Any]:
    """Return a copy of the current settings dict."""
    if not _current:
        _load()
    return dict(_current)


def update_settings(patch: dict[str, Any]) -> dict[str, Any]:
    """Apply *patch* (unknown keys ignored), persist to disk, return full settings."""
    if not _current:
        _load()
    for k, v in patch.items():
        if k in DEFAULTS:
            _current[k] = _coerce(k, v)
    _FILE.parent.mkdir(parents=True, exist_ok=True)
    _FILE.write_text(json.dumps(_current, indent=2))
    return dict(_current)


def apply_recommendation(recommendation) -> dict[str, Any]:
    """Copy recommended timer durations into the persisted settings."""
    return update_settings({
        "pomodoro_duration": recommendation.recommended_work_duration,
        "short_break_duration": recommendation.recommended_short_break_duration,
        "long_break_duration": recommendation.recommended_long_break_duration,
    })


# Eagerly load on import
_load()
