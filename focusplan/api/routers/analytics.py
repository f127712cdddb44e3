"""
/analytics — session recommendations, focus patterns, focus metrics,
daily analytics and rule-based insights.

The services never raise; a failed aggregation comes back as zeroed data.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...api.schemas import (
    DailyAnalyticsOut,
    FocusMetricsOut,
    InsightsOut,
    SessionRecommendationOut,
    UserFocusPatternOut,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _get_services(request: Request):
    return request.app.state.services


@router.get("/recommendations", response_model=SessionRecommendationOut)
async def get_recommendations(user_id: str = Query(...), services=Depends(_get_services)):
    """Personalised work / break durations from the last 30 days of work sessions."""
    rec = await services["adaptive"].get_session_recommendations(user_id)
    return SessionRecommendationOut(**asdict(rec))


@router.get("/focus-patterns", response_model=UserFocusPatternOut)
async def get_focus_patterns(user_id: str = Query(...), services=Depends(_get_services)):
    pattern = await services["adaptive"].get_user_focus_pattern(user_id)
    return UserFocusPatternOut(**asdict(pattern))


@router.get("/focus-metrics", response_model=FocusMetricsOut)
async def get_focus_metrics(user_id: str = Query(...), services=Depends(_get_services)):
    metrics = await services["focus"].get_focus_metrics(user_id)
    if metrics is None:
        raise HTTPException(status_code=503, detail="Focus metrics unavailable")
    return FocusMetricsOut(**asdict(metrics))


@router.get("/daily", response_model=List[DailyAnalyticsOut])
async def get_daily(
    user_id: str = Query(...),
    days: int = Query(default=7, ge=1, le=365),
    services=Depends(_get_services),
):
    """One row per calendar day, oldest first; days without sessions are zeroed."""
    daily = await services["insights"].get_daily_analytics(user_id, days)
    return [DailyAnalyticsOut(**asdict(d)) for d in daily]


@router.get("/insights", response_model=InsightsOut)
async def get_insights(
    user_id: str = Query(...),
    days: int = Query(default=30, ge=1, le=365),
    services=Depends(_get_services),
):
    report = await services["insights"].get_insights(user_id, days)
    return InsightsOut(
        insights=[asdict(i) for i in report.insights],
        patterns=asdict(report.patterns),
        data_points=report.data_points,
        start=report.start,
        end=report.end,
        days=days,
    )
