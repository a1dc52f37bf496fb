from datetime import datetime, timedelta, timezone

from worktime.models import AuditLog
from worktime.services.audit_cleanup import cleanup_old_access_logs, get_audit_log_stats

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def add_log(db, action, days_old):
    db.add(AuditLog(action=action, user="admin", created_at=NOW - timedelta(days=days_old)))
    db.commit()


def test_cleanup_keeps_session_logs_and_recent_access_logs(db):
    add_log(db, "login_success", 120)
    add_log(db, "project_updated", 95)
    add_log(db, "login_failed", 10)
    add_log(db, "session_started", 400)
    add_log(db, "session_stopped", 200)

    deleted = cleanup_old_access_logs(db, days_to_keep=90, now=NOW)

    assert deleted == 2
    remaining = sorted(a for (a,) in db.query(AuditLog.action).all())
    assert remaining == ["login_failed", "session_started", "session_stopped"]


def test_stats(db):
    add_log(db, "login_success", 3)
    add_log(db, "session_started", 5)
    add_log(db, "session_stopped", 1)

    stats = get_audit_log_stats(db)
    assert stats["total_logs"] == 3
    assert stats["access_logs"] == 1
    assert stats["session_logs"] == 2
    assert stats["oldest_session_log"].startswith("2024-05-27")
    assert stats["oldest_access_log"].startswith("2024-05-29")


def test_stats_on_empty_table(db):
    stats = get_audit_log_stats(db)
    assert stats["total_logs"] == 0
    assert stats["oldest_access_log"] is None
