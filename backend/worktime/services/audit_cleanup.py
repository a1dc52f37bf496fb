"""Audit log retention: access logs expire, session logs are kept."""

from datetime import timedelta
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_
import logging

from worktime.models.audit_log import AuditLog
from worktime.utils.timekeeping import utcnow

log = logging.getLogger(__name__)

SESSION_ACTIONS = "session%"


def cleanup_old_access_logs(db: Session, days_to_keep: int = 90, now=None) -> int:
    """
    Delete access and administration logs older than ``days_to_keep`` days.

    Session logs (``session_started``, ``session_stopped``) are part of the
    work record and are never deleted.

    Args:
        db: Database session
        days_to_keep: Retention window in days (default: 90)
        now: Reference instant, defaults to the current UTC time

    Returns:
        Number of audit log entries deleted
    """
    cutoff_date = (now or utcnow()) - timedelta(days=days_to_keep)

    deleted = db.query(AuditLog).filter(
        and_(
            AuditLog.created_at < cutoff_date,
            ~AuditLog.action.like(SESSION_ACTIONS),
        )
    ).delete(synchronize_session=False)

    db.commit()

    log.info(f"Audit cleanup: deleted {deleted} access log entries older than {days_to_keep} days (cutoff: {cutoff_date.isoformat()})")

    return deleted


def _oldest(db: Session, *criteria) -> Optional[str]:
    entry = db.query(AuditLog).filter(*criteria).order_by(AuditLog.created_at.asc()).first()
    return entry.created_at.isoformat() if entry else None


def get_audit_log_stats(db: Session) -> dict:
    """Counts per log family and the oldest entry of each."""
    is_session = AuditLog.action.like(SESSION_ACTIONS)
    return {
        "total_logs": db.query(AuditLog).count(),
        "access_logs": db.query(AuditLog).filter(~is_session).count(),
        "session_logs": db.query(AuditLog).filter(is_session).count(),
        "oldest_access_log": _oldest(db, ~is_session),
        "oldest_session_log": _oldest(db, is_session),
    }
