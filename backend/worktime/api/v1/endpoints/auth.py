from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from worktime.api.deps import get_session_engine
from worktime.api.errors import raise_for_outcome
from worktime.auth import get_current_active_user, issue_token_for
from worktime.database import get_db
from worktime.models.user import User
from worktime.schemas.auth import LoginRequest, LoginResponse, Token
from worktime.schemas.user import UserOut
from worktime.services.session_engine import Identification, LoginAction, SessionEngine
from worktime.utils.audit_logger import create_audit_log

router = APIRouter()


def _check_credentials(request: Request, db: Session, engine: SessionEngine, username: str, password: str) -> Identification:
    outcome = engine.authenticate_credentials(username, password)
    if not outcome.ok:
        create_audit_log(db=db, request=request, action="login_failed", user=username)
        raise_for_outcome(outcome)
    ident: Identification = outcome.value
    create_audit_log(
        db=db,
        request=request,
        action="login_success",
        entity_type="user",
        entity_id=ident.user.id,
        user=ident.user.username,
    )
    return ident


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
):
    """Log in with username and password; ``pending_stop`` is set when a session is running."""
    ident = _check_credentials(request, db, engine, credentials.username, credentials.password)
    return LoginResponse(
        access_token=issue_token_for(ident.user),
        token_type="bearer",
        user=UserOut.model_validate(ident.user),
        pending_stop=ident.action is LoginAction.CONFIRM_STOP,
    )


@router.post("/token", response_model=Token)
async def login_for_access_token(
    request: Request,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
):
    """OAuth2 password flow for API clients."""
    ident = _check_credentials(request, db, engine, form_data.username, form_data.password)
    return {"access_token": issue_token_for(ident.user), "token_type": "bearer"}


@router.get("/users/me", response_model=UserOut)
async def read_users_me(current_user: Annotated[User, Depends(get_current_active_user)]):
    """Get current user information."""
    return current_user
