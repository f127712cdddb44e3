"""
Central configuration for the focus planner service.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    sessions_db: str = "sessions.db"

    # Analytics
    lookback_days: int = 30                  # history window for recommendations

    # Scheduling
    workday_start_hour: int = 8
    workday_end_hour: int = 18

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (FOCUSPLAN_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"FOCUSPLAN_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, _coerce(getattr(cfg, k), os.environ[env_key]))
        cfg.data_dir = Path(cfg.data_dir)
        return cfg


def _coerce(current, raw: str):
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return type(current)(raw)


# Module-level singleton
config = Config.load()
