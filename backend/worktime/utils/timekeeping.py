"""Clock helpers and duration formatting shared by sessions, evaluation and export."""

import math
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_seconds(start_time: datetime, now: Optional[datetime] = None) -> int:
    """Whole seconds a session has been running; never negative."""
    now = as_utc(now or utcnow())
    return max(0, int((now - as_utc(start_time)).total_seconds()))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def minutes_between(start_time: datetime, end_time: datetime) -> int:
    """Signed whole minutes between two instants, rounded half up."""
    seconds = (as_utc(end_time) - as_utc(start_time)).total_seconds()
    return round_half_up(seconds / 60)


def format_duration(minutes) -> str:
    """Render minutes as ``'<h>h <m>m'``; invalid or negative input is ``'0h 0m'``."""
    if minutes is None or isinstance(minutes, bool):
        return "0h 0m"
    try:
        minutes = float(minutes)
    except (TypeError, ValueError):
        return "0h 0m"
    if math.isnan(minutes) or minutes < 0:
        return "0h 0m"
    hours, mins = divmod(round_half_up(minutes), 60)
    return f"{hours}h {mins}m"


def format_elapsed(total_seconds: int) -> str:
    """HH:MM:SS for running session timers."""
    total_seconds = max(0, int(total_seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
