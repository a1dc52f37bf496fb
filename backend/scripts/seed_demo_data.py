#!/usr/bin/env python
"""
Seed script for a demo registry with some tracked history.
Run with: cd backend; python scripts/seed_demo_data.py
Uses DATABASE_URL from .env (defaults to the local SQLite file).
"""

import os
import sys

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import timedelta

from worktime.database import SessionLocal, init_db
from worktime.models.completed_session import CompletedSession
from worktime.services.bootstrap import ensure_admin, seed_demo_data
from worktime.services.session_engine import SessionEngine
from worktime.utils.timekeeping import utcnow

# (user, project, days ago, minutes worked)
DEMO_HISTORY = [
    ("user123", "proj001", 6, 240),
    ("user789", "proj001", 6, 185),
    ("user123", "proj002", 5, 420),
    ("user789", "proj002", 4, 95),
    ("user456", "proj001", 3, 60),
    ("user202", "proj004", 3, 300),
    ("user202", "proj004", 1, 270),
    ("user123", "proj001", 1, 455),
]


def seed_history(db):
    """Replay demo sessions through the engine with a moved clock."""
    if db.query(CompletedSession).count():
        print("Completed sessions already exist. Skipping history.")
        return

    for user_id, project_id, days_ago, minutes in DEMO_HISTORY:
        start = utcnow().replace(hour=8, minute=0, second=0, microsecond=0) - timedelta(days=days_ago)
        clock = {"now": start}
        engine = SessionEngine(db, clock=lambda: clock["now"])

        started = engine.start_session(user_id, project_id)
        if not started.ok:
            print(f"Skipped {user_id}/{project_id}: {started.detail}")
            continue
        clock["now"] = start + timedelta(minutes=minutes)
        stopped = engine.stop_session(user_id)
        print(f"Recorded {stopped.value.duration_formatted} for {user_id} on {project_id}")


def main():
    init_db()
    db = SessionLocal()
    try:
        ensure_admin(db)
        if seed_demo_data(db):
            print("Created demo cost centers, users and projects (passwords: password<digits of id>)")
        else:
            print("Registry already populated. Skipping registry seed.")
        seed_history(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
