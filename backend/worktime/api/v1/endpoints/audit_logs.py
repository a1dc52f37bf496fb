from datetime import date, datetime, time, timezone
from typing import List, Annotated, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from worktime.api.errors import not_found
from worktime.auth import require_permission
from worktime.authorization import Permission
from worktime.database import get_db
from worktime.models.audit_log import AuditLog
from worktime.models.user import User
from worktime.schemas.audit import AuditLogInDB, AuditLogStats
from worktime.services.audit_cleanup import SESSION_ACTIONS, get_audit_log_stats

router = APIRouter()


@router.get("", response_model=List[AuditLogInDB])
async def read_audit_logs(
    skip: int = 0,
    limit: int = 100,
    action: Optional[str] = Query(None, description="Filter by specific action"),
    action_type: Optional[str] = Query(None, description="Filter by action type: 'access', 'session', or 'all'"),
    ip_address: Optional[str] = Query(None, description="Filter by IP address"),
    start_date: Optional[date] = Query(None, description="Filter created_at >= YYYY-MM-DD"),
    end_date: Optional[date] = Query(None, description="Filter created_at <= YYYY-MM-DD"),
    user: Optional[str] = Query(None, description="Filter by username"),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_AUDIT_LOGS))] = None,
    db: Session = Depends(get_db)
):
    """Retrieve audit logs, newest first, with optional filters."""
    query = db.query(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())

    if action:
        query = query.filter(AuditLog.action == action)

    if action_type == "access":
        query = query.filter(~AuditLog.action.like(SESSION_ACTIONS))
    elif action_type == "session":
        query = query.filter(AuditLog.action.like(SESSION_ACTIONS))

    if ip_address:
        query = query.filter(AuditLog.ip_address == ip_address)

    if start_date:
        query = query.filter(AuditLog.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
    if end_date:
        query = query.filter(AuditLog.created_at <= datetime.combine(end_date, time.max, tzinfo=timezone.utc))

    if user:
        query = query.filter(AuditLog.user == user)

    return query.offset(skip).limit(limit).all()


@router.get("/stats", response_model=AuditLogStats)
async def read_audit_log_stats(
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_AUDIT_LOGS))] = None,
    db: Session = Depends(get_db)
):
    """Storage statistics for the retention policy."""
    return get_audit_log_stats(db)


@router.get("/{log_id}", response_model=AuditLogInDB)
async def read_audit_log(
    log_id: int,
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_AUDIT_LOGS))] = None,
    db: Session = Depends(get_db)
):
    """Retrieve a single audit log by ID."""
    db_log = db.get(AuditLog, log_id)
    if db_log is None:
        raise not_found("Audit log")
    return db_log
