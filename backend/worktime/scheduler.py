"""APScheduler integration for periodic maintenance jobs."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from worktime.config import settings
from worktime.database import SessionLocal
from worktime.services.audit_cleanup import cleanup_old_access_logs

log = logging.getLogger(__name__)

AUDIT_CLEANUP_JOB_ID = "audit_cleanup_job"

# Global scheduler instance
scheduler = AsyncIOScheduler()


def audit_cleanup_job():
    """Apply the audit log retention policy."""
    db = SessionLocal()
    try:
        cleanup_old_access_logs(db, days_to_keep=settings.audit_retention_days)
    except Exception as e:
        log.error(f"Audit cleanup failed: {e}", exc_info=True)
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    """Register maintenance jobs and start the scheduler."""
    scheduler.add_job(
        audit_cleanup_job,
        IntervalTrigger(hours=settings.audit_cleanup_hours),
        id=AUDIT_CLEANUP_JOB_ID,
        replace_existing=True,
    )
    if not scheduler.running:
        scheduler.start()
        log.info(f"APScheduler started; audit cleanup every {settings.audit_cleanup_hours}h")


def shutdown_scheduler():
    """Shutdown the APScheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=True)
        log.info("APScheduler shut down successfully")
