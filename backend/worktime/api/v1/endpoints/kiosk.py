"""
Shared-terminal endpoints.

Kiosks are unauthenticated: whoever stands at the terminal identifies with
a badge scan or credentials, and the kiosk keeps that identity until the
next logout. Each request names its kiosk so several terminals can run
side by side.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from worktime.api.deps import get_kiosk_registry, get_session_engine
from worktime.api.errors import raise_for_outcome
from worktime.api.v1.endpoints.active_sessions import record_session_started, record_session_stopped
from worktime.auth import issue_token_for
from worktime.database import get_db
from worktime.schemas.kiosk import KioskLoginRequest, KioskScanRequest, KioskSelectProjectRequest, KioskView
from worktime.schemas.session import ActiveSessionOut, CompletedSessionOut
from worktime.schemas.user import UserOut
from worktime.services.kiosk import Kiosk, KioskRegistry, KioskState, KioskTransition
from worktime.services.outcome import Outcome
from worktime.services.session_engine import SessionEngine
from worktime.utils.audit_logger import create_audit_log

router = APIRouter()


def _view(kiosk: Kiosk, engine: SessionEngine, transition: KioskTransition, issue_token: bool = False) -> KioskView:
    """Render a transition. Only transitions that log someone in carry a token."""
    now = engine.clock()
    view = KioskView(kiosk_id=kiosk.kiosk_id, state=transition.state.value, message=transition.message)

    user = transition.user
    if user is None and transition.state is not KioskState.LOGGED_OUT:
        user = engine.get_user(kiosk.user_id)
    if user is not None:
        view.user = UserOut.model_validate(user)
        if issue_token and transition.state is KioskState.LOGGED_IN and transition.started_session is None:
            view.access_token = issue_token_for(user)
        elif transition.state is KioskState.AWAITING_STOP_CONFIRMATION:
            pending = engine.active_session_for(user.id)
            if pending is not None:
                view.pending_session = ActiveSessionOut.from_session(pending, now)

    if transition.started_session is not None:
        view.started_session = ActiveSessionOut.from_session(transition.started_session, now)
    if transition.completed_session is not None:
        view.completed_session = CompletedSessionOut.model_validate(transition.completed_session)
    return view


def _finish(kiosk: Kiosk, engine: SessionEngine, outcome: Outcome, issue_token: bool = False) -> KioskView:
    transition: KioskTransition = raise_for_outcome(outcome)
    return _view(kiosk, engine, transition, issue_token)


@router.get("/{kiosk_id}", response_model=KioskView)
async def read_kiosk(
    kiosk_id: str,
    engine: SessionEngine = Depends(get_session_engine),
    kiosks: KioskRegistry = Depends(get_kiosk_registry),
):
    kiosk = kiosks.get(kiosk_id)
    return _view(kiosk, engine, kiosk.snapshot(engine))


@router.post("/{kiosk_id}/scan", response_model=KioskView)
async def scan(
    request: Request,
    kiosk_id: str,
    payload: KioskScanRequest,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    kiosks: KioskRegistry = Depends(get_kiosk_registry),
):
    """Handle a scanned ``USER_ID:...`` badge or ``PROJECT_ID:...`` code."""
    kiosk = kiosks.get(kiosk_id)
    acting_user = engine.get_user(kiosk.user_id) if kiosk.user_id else None
    outcome = kiosk.scan(engine, payload.payload)
    if outcome.ok and outcome.value.started_session is not None:
        record_session_started(db, request, outcome.value.started_session, acting_user.username, "qr")
    return _finish(kiosk, engine, outcome, issue_token=True)


@router.post("/{kiosk_id}/login", response_model=KioskView)
async def login(
    request: Request,
    kiosk_id: str,
    payload: KioskLoginRequest,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    kiosks: KioskRegistry = Depends(get_kiosk_registry),
):
    kiosk = kiosks.get(kiosk_id)
    outcome = kiosk.login(engine, payload.username, payload.password)
    create_audit_log(
        db=db,
        request=request,
        action="login_success" if outcome.ok else "login_failed",
        entity_type="user" if outcome.ok else None,
        entity_id=outcome.value.user.id if outcome.ok else None,
        user=payload.username,
        details={"kiosk_id": kiosk_id},
    )
    return _finish(kiosk, engine, outcome, issue_token=True)


@router.post("/{kiosk_id}/select-project", response_model=KioskView)
async def select_project(
    request: Request,
    kiosk_id: str,
    payload: KioskSelectProjectRequest,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    kiosks: KioskRegistry = Depends(get_kiosk_registry),
):
    """Start work on a project picked from the list instead of scanned."""
    kiosk = kiosks.get(kiosk_id)
    acting_user = engine.get_user(kiosk.user_id) if kiosk.user_id else None
    outcome = kiosk.select_project(engine, payload.project_id)
    if outcome.ok:
        record_session_started(db, request, outcome.value.started_session, acting_user.username, "manual")
    return _finish(kiosk, engine, outcome)


@router.post("/{kiosk_id}/confirm-stop", response_model=KioskView)
async def confirm_stop(
    request: Request,
    kiosk_id: str,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    kiosks: KioskRegistry = Depends(get_kiosk_registry),
):
    kiosk = kiosks.get(kiosk_id)
    acting_user = engine.get_user(kiosk.user_id) if kiosk.user_id else None
    outcome = kiosk.confirm_stop(engine)
    if outcome.ok:
        record_session_stopped(db, request, outcome.value.completed_session, acting_user.username)
    return _finish(kiosk, engine, outcome)


@router.post("/{kiosk_id}/cancel-stop", response_model=KioskView)
async def cancel_stop(
    kiosk_id: str,
    engine: SessionEngine = Depends(get_session_engine),
    kiosks: KioskRegistry = Depends(get_kiosk_registry),
):
    """Dismiss the stop prompt without touching the running session."""
    kiosk = kiosks.get(kiosk_id)
    return _finish(kiosk, engine, kiosk.cancel_stop(engine), issue_token=True)


@router.post("/{kiosk_id}/logout", response_model=KioskView)
async def logout(
    kiosk_id: str,
    engine: SessionEngine = Depends(get_session_engine),
    kiosks: KioskRegistry = Depends(get_kiosk_registry),
):
    kiosk = kiosks.get(kiosk_id)
    return _finish(kiosk, engine, kiosk.logout())
