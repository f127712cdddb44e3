"""
/settings — read and update the user's timer settings.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from ...settings import DEFAULTS, apply_recommendation, get_settings, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsPatch(BaseModel):
    pomodoro_duration:    Optional[int]  = Field(None, ge=1, le=180)
    short_break_duration: Optional[int]  = Field(None, ge=1, le=60)
    long_break_duration:  Optional[int]  = Field(None, ge=1, le=120)
    early_bird_mode:      Optional[bool] = None
    night_owl_mode:       Optional[bool] = None


def _get_services(request: Request):
    return request.app.state.services


@router.get("")
def read_settings():
    """Return current settings with their defaults for reference."""
    current = get_settings()
    return {"settings": current, "defaults": DEFAULTS}


@router.put("")
def write_settings(patch: SettingsPatch):
    """Apply a partial update; unknown keys are ignored. Persists to data/settings.json."""
    data = {k: v for k, v in patch.model_dump().items() if v is not None}
    return {"settings": update_settings(data)}


@router.post("/apply-recommendation")
async def apply_recommended_durations(user_id: str = Query(...), services=Depends(_get_services)):
    """Copy the user's current session recommendation into the timer settings."""
    rec = await services["adaptive"].get_session_recommendations(user_id)
    return {"settings": apply_recommendation(rec), "confidence": rec.confidence}
