"""Request-scoped dependencies for the session engine and kiosks."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from worktime.database import get_db
from worktime.services.kiosk import KioskRegistry
from worktime.services.session_engine import SessionEngine, UserLockRegistry
from worktime.utils.timekeeping import utcnow


def get_clock():
    """Current-time source; overridden in tests."""
    return utcnow


def get_session_engine(request: Request, db: Session = Depends(get_db), clock=Depends(get_clock)) -> SessionEngine:
    locks: UserLockRegistry = request.app.state.user_locks
    return SessionEngine(db, locks=locks, clock=clock)


def get_kiosk_registry(request: Request) -> KioskRegistry:
    return request.app.state.kiosks
