"""
Convenience launcher — starts the focus planner API and optionally seeds
synthetic session history once it is up.

Usage:
    python start.py             # API only
    python start.py --seed      # API + 30 days of demo sessions for "demo"
"""

from __future__ import annotations

import argparse
import subprocess
import sys
import time


def start_api() -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "focusplan.main"],
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


def seed_history(user_id: str) -> None:
    subprocess.run(
        [sys.executable, "scripts/seed_sessions.py", "--user", user_id],
        check=False,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Start the focus planner API")
    parser.add_argument("--seed", action="store_true", help="Seed demo session history")
    parser.add_argument("--user", default="demo", help="User id to seed (default: demo)")
    args = parser.parse_args()

    print("Starting focus planner API…")
    api_proc = start_api()

    if args.seed:
        time.sleep(1.5)  # give the API a moment to bind
        print(f"Seeding session history for {args.user!r}…")
        seed_history(args.user)

    print("\nAPI → http://127.0.0.1:8765  (docs: /docs)")
    print("Press Ctrl+C to stop.\n")

    try:
        api_proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down…")
        api_proc.terminate()
        api_proc.wait()


if __name__ == "__main__":
    main()
