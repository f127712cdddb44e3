"""
Session History Seeder — posts synthetic focus/break sessions to a running
focus planner API so the analytics endpoints have something to chew on.

Usage:
    # Make sure the API is running first:
    #   python start.py
    # Then in a separate terminal:
    python scripts/seed_sessions.py                       # 30 days for "demo"
    python scripts/seed_sessions.py --user alice --days 14
    python scripts/seed_sessions.py --profile night_owl   # evening-heavy history
"""

from __future__ import annotations

import argparse
import json
import random
import urllib.error
import urllib.request
from datetime import datetime, timedelta
from typing import Iterator

API = "http://127.0.0.1:8765"

# profile → candidate start hours for work sessions
PROFILES = {
    "early_bird": [6, 7, 8, 9, 10, 11],
    "intermediate": [9, 10, 11, 14, 15, 16],
    "night_owl": [17, 18, 19, 20, 21, 22],
}


# ---------------------------------------------------------------------------
# Low-level HTTP helper
# ---------------------------------------------------------------------------

def _post(path: str, body: dict) -> bool:
    try:
        data = json.dumps(body).encode()
        req = urllib.request.Request(
            f"{API}{path}",
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=3):
            return True
    except (urllib.error.URLError, OSError) as e:
        print(f"  [!] API unreachable: {e}")
        return False


def _get(path: str) -> dict | None:
    try:
        with urllib.request.urlopen(f"{API}{path}", timeout=3) as r:
            return json.loads(r.read())
    except (urllib.error.URLError, OSError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

def generate_sessions(user: str, days: int, profile: str, rng: random.Random) -> Iterator[dict]:
    """A pomodoro cycle or two per active day: work, short break, work, long break."""
    today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    hours = PROFILES[profile]
    for offset in range(days, 0, -1):
        day = today - timedelta(days=offset)
        if rng.random() < 0.2:
            continue  # skipped day
        start = day + timedelta(hours=rng.choice(hours))
        for cycle in range(rng.randint(1, 2)):
            for kind, minutes in (("work", 25), ("short_break", 5), ("work", 25), ("long_break", 15)):
                interruptions = rng.choice([0, 0, 0, 1, 2]) if kind == "work" else 0
                completed = kind != "work" or interruptions < 2
                yield {
                    "user_id": user,
                    "type": kind,
                    "duration": minutes,
                    "started_at": start.isoformat(),
                    "completed_at": (start + timedelta(minutes=minutes)).isoformat() if completed else None,
                    "is_completed": completed,
                    "was_interrupted": interruptions > 0,
                    "interruption_count": interruptions,
                }
                start += timedelta(minutes=minutes)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed synthetic session history")
    parser.add_argument("--user", default="demo")
    parser.add_argument("--days", type=int, default=30)
    parser.add_argument("--profile", choices=list(PROFILES), default="intermediate")
    parser.add_argument("--seed", type=int, default=7, help="Random seed (default 7)")
    args = parser.parse_args()

    health = _get("/health")
    if not health:
        print(f"[!] Cannot reach API at {API}")
        print("    Start it first: python start.py")
        return
    print(f"[✓] API connected — v{health.get('version', '?')}")

    rng = random.Random(args.seed)
    sent = sum(1 for body in generate_sessions(args.user, args.days, args.profile, rng)
               if _post("/sessions", body))
    print(f"[✓] Recorded {sent} sessions for {args.user!r}")

    rec = _get(f"/analytics/recommendations?user_id={args.user}")
    if rec:
        print(
            f"    Recommended: {rec['recommended_work_duration']} min work / "
            f"{rec['recommended_short_break_duration']} min break  "
            f"(confidence {rec['confidence']}%)"
        )


if __name__ == "__main__":
    main()
