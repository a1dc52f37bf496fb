from datetime import date
from typing import List, Annotated, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from worktime.api.deps import get_session_engine
from worktime.api.v1.endpoints.active_sessions import stop_for
from worktime.auth import get_current_active_user, require_permission
from worktime.authorization import Permission, authorize, visible_cost_center_ids
from worktime.api.errors import forbidden
from worktime.database import get_db
from worktime.models.user import User
from worktime.schemas.session import CompletedSessionOut, StopSessionRequest
from worktime.services.evaluation import SessionWindow
from worktime.services.export import export_filename, sessions_to_csv
from worktime.services.ledger import query_completed_sessions
from worktime.services.session_engine import SessionEngine
from worktime.utils.timekeeping import utcnow

router = APIRouter()


def _filtered_query(db: Session, user: User, start_date, end_date, project_id, employee_id, scoped: bool = True):
    window = SessionWindow.from_bounds(start_date, end_date)
    return query_completed_sessions(
        db,
        start=window.start,
        end=window.end,
        project_id=project_id,
        employee_id=employee_id,
        cost_center_ids=visible_cost_center_ids(user) if scoped else None,
    )


@router.get("", response_model=List[CompletedSessionOut])
async def read_completed_sessions(
    skip: int = 0,
    limit: int = Query(500, le=5000),
    start_date: Optional[date] = Query(None, description="Sessions started on or after this day"),
    end_date: Optional[date] = Query(None, description="Sessions started on or before this day"),
    project_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(get_current_active_user)] = None
):
    """Completed sessions, newest first. Users without ledger access only see their own."""
    scoped = True
    if not authorize(current_user.role, Permission.VIEW_COMPLETED_SESSIONS):
        if not authorize(current_user.role, Permission.TRACK_TIME):
            raise forbidden()
        # Own history is complete, including projects outside the user's cost centers
        employee_id = current_user.id
        scoped = False
    query = _filtered_query(db, current_user, start_date, end_date, project_id, employee_id, scoped)
    return query.offset(skip).limit(limit).all()


@router.post("", response_model=CompletedSessionOut, status_code=status.HTTP_201_CREATED)
async def record_completed_session(
    request: Request,
    payload: StopSessionRequest,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    current_user: Annotated[User, Depends(require_permission(Permission.TRACK_TIME))] = None
):
    """Close ``user_id``'s running session into the ledger."""
    return stop_for(request, db, engine, current_user, payload.user_id)


@router.get("/export")
async def export_completed_sessions(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    project_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.EXPORT_SESSIONS))] = None
):
    """CSV export of completed sessions matching the filters."""
    sessions = _filtered_query(db, current_user, start_date, end_date, project_id, employee_id).all()
    filename = export_filename("report", utcnow().date().isoformat())
    return Response(
        content=sessions_to_csv(sessions),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
