"""
FastAPI application — local focus planner API.
Runs on http://127.0.0.1:8765 by default.

The session store and analytics services live on app.state so that each
call to create_app() produces a fully independent instance with no shared
module-level globals. This makes test isolation straightforward.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..analytics.adaptive_sessions import AdaptiveSessionsService
from ..analytics.focus_metrics import FocusMetricsService
from ..analytics.insights import InsightsService
from ..analytics.store import SessionStore
from ..clock import Clock, system_clock
from ..config import config
from ..logging_config import get_logger, setup_logging

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: initialises and tears down all per-app state
# ---------------------------------------------------------------------------

def _lifespan(db_path: Path, clock: Clock):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = SessionStore(db_path)
        app.state.store = store
        app.state.clock = clock
        app.state.services = {
            "adaptive": AdaptiveSessionsService(store, clock, config.lookback_days),
            "focus": FocusMetricsService(store, clock, config.lookback_days),
            "insights": InsightsService(store, clock),
        }
        logger.info("service_started", db=str(db_path))

        yield

        logger.info("service_stopped")

    return lifespan


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(db_path: Optional[Path] = None, clock: Clock = system_clock) -> FastAPI:
    app = FastAPI(
        title="Focus Planner",
        description="Adaptive task scheduling and focus-session analytics",
        version="0.1.0",
        lifespan=_lifespan(db_path or config.data_dir / config.sessions_db, clock),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import analytics, schedule, sessions, settings

    app.include_router(schedule.router)
    app.include_router(sessions.router)
    app.include_router(analytics.router)
    app.include_router(settings.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": app.version}

    return app


setup_logging()
app = create_app()
