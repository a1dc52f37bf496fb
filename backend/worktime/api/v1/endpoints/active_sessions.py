import logging
from typing import List, Annotated
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from worktime.api.deps import get_session_engine
from worktime.api.errors import forbidden, raise_for_outcome
from worktime.auth import require_permission
from worktime.authorization import Permission, can_act_for, visible_cost_center_ids
from worktime.database import get_db
from worktime.models.user import User
from worktime.schemas.session import ActiveSessionOut, CompletedSessionOut, StartSessionRequest
from worktime.services.session_engine import SessionEngine
from worktime.utils.audit_logger import create_audit_log

log = logging.getLogger(__name__)
router = APIRouter()


def record_session_started(db: Session, request: Request, session, actor: str, trigger: str):
    create_audit_log(
        db=db,
        request=request,
        action="session_started",
        entity_type="session",
        entity_id=session.id,
        user=actor,
        details={
            "user_id": session.user_id,
            "project_id": session.project_id,
            "trigger": trigger,
        }
    )


def record_session_stopped(db: Session, request: Request, completed, actor: str):
    create_audit_log(
        db=db,
        request=request,
        action="session_stopped",
        entity_type="session",
        entity_id=completed.id,
        user=actor,
        details={
            "user_id": completed.employee_id,
            "project_id": completed.project_id,
            "duration_minutes": completed.duration_minutes,
        }
    )


def stop_for(request: Request, db: Session, engine: SessionEngine, actor: User, user_id: str) -> CompletedSessionOut:
    """Close ``user_id``'s running session on behalf of ``actor``."""
    if not can_act_for(actor, user_id):
        raise forbidden()
    completed = raise_for_outcome(engine.stop_session(user_id))
    record_session_stopped(db, request, completed, actor.username)
    return CompletedSessionOut.model_validate(completed)


@router.get("", response_model=List[ActiveSessionOut])
async def read_active_sessions(
    engine: SessionEngine = Depends(get_session_engine),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_ACTIVE_SESSIONS))] = None
):
    """Running sessions with live timers, newest first."""
    now = engine.clock()
    sessions = engine.list_active_sessions(visible_cost_center_ids(current_user))
    return [ActiveSessionOut.from_session(s, now) for s in sessions]


@router.post("", response_model=ActiveSessionOut, status_code=status.HTTP_201_CREATED)
async def start_active_session(
    request: Request,
    payload: StartSessionRequest,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    current_user: Annotated[User, Depends(require_permission(Permission.TRACK_TIME))] = None
):
    """Start a session; employees may only start their own."""
    user_id = payload.user_id or current_user.id
    if not can_act_for(current_user, user_id):
        raise forbidden()

    session = raise_for_outcome(engine.start_session(user_id, payload.project_id, payload.trigger))
    record_session_started(db, request, session, current_user.username, payload.trigger)
    return ActiveSessionOut.from_session(session, engine.clock())


@router.delete("/{user_id}", response_model=CompletedSessionOut)
async def stop_active_session(
    request: Request,
    user_id: str,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    current_user: Annotated[User, Depends(require_permission(Permission.TRACK_TIME))] = None
):
    """Stop the user's running session and return the completed record."""
    return stop_for(request, db, engine, current_user, user_id)
