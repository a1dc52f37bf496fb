"""Read access to the completed-session ledger."""

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from worktime.models.completed_session import CompletedSession
from worktime.models.project import Project
from worktime.utils.timekeeping import as_utc


def query_completed_sessions(
    db: Session,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    project_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    cost_center_ids: Optional[Iterable[int]] = None,
):
    """
    Build a newest-first query over completed sessions.

    Args:
        db: Database session
        start: Only sessions that began at or after this instant
        end: Only sessions that began at or before this instant
        project_id: Restrict to one project
        employee_id: Restrict to one employee
        cost_center_ids: Restrict to projects in these cost centers (None = all)
    """
    query = db.query(CompletedSession)
    if start is not None:
        query = query.filter(CompletedSession.timestamp >= as_utc(start))
    if end is not None:
        query = query.filter(CompletedSession.timestamp <= as_utc(end))
    if project_id:
        query = query.filter(CompletedSession.project_id == project_id)
    if employee_id:
        query = query.filter(CompletedSession.employee_id == employee_id)
    if cost_center_ids is not None:
        query = query.join(Project, CompletedSession.project_id == Project.id).filter(
            Project.cost_center_id.in_(list(cost_center_ids))
        )
    return query.order_by(CompletedSession.timestamp.desc(), CompletedSession.id.desc())


def list_completed_sessions(db: Session, **filters) -> List[CompletedSession]:
    return query_completed_sessions(db, **filters).all()
