"""
Kiosk interaction state machine.

A kiosk is a shared terminal that users identify at (QR badge or
credentials) before scanning a project code. Each kiosk only remembers who
is logged in and whether a stop confirmation is pending; sessions
themselves live in the database and are changed through ``SessionEngine``.

A failed operation never changes the kiosk state.
"""

import logging
import threading
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from worktime.authorization import cancel_stop_logs_in, keeps_login_after_start
from worktime.constants.errors import ErrorCode
from worktime.models.active_session import ActiveSession
from worktime.models.completed_session import CompletedSession
from worktime.models.user import User
from worktime.services.outcome import Outcome
from worktime.services.session_engine import (
    Identification,
    LoginAction,
    QRKind,
    SessionEngine,
    SessionTrigger,
    parse_qr_payload,
)

log = logging.getLogger(__name__)


class KioskState(str, Enum):
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"
    AWAITING_STOP_CONFIRMATION = "awaiting_stop_confirmation"


class KioskTransition(BaseModel):
    """What happened on a successful kiosk operation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: KioskState
    user: Optional[User] = None
    started_session: Optional[ActiveSession] = None
    completed_session: Optional[CompletedSession] = None
    message: Optional[str] = None


class Kiosk:
    def __init__(self, kiosk_id: str):
        self.kiosk_id = kiosk_id
        self.state = KioskState.LOGGED_OUT
        self.user_id: Optional[str] = None
        self._lock = threading.Lock()

    def __repr__(self):
        return f"<Kiosk {self.kiosk_id} {self.state.value} user={self.user_id}>"

    def _move(self, state: KioskState, user_id: Optional[str] = None):
        if state is KioskState.LOGGED_OUT:
            user_id = None
        log.debug(f"Kiosk {self.kiosk_id}: {self.state.value} -> {state.value} (user={user_id})")
        self.state = state
        self.user_id = user_id

    def _current_user(self, engine: SessionEngine) -> Optional[User]:
        return engine.get_user(self.user_id) if self.user_id else None

    # Identification

    def _apply_identification(self, outcome: Outcome) -> Outcome:
        if not outcome.ok:
            return outcome
        ident: Identification = outcome.value
        if ident.action is LoginAction.CONFIRM_STOP:
            self._move(KioskState.AWAITING_STOP_CONFIRMATION, ident.user.id)
            message = f"{ident.user.name}, confirm to stop your running session."
        else:
            self._move(KioskState.LOGGED_IN, ident.user.id)
            message = f"Welcome, {ident.user.name}. Scan a project code."
        return Outcome.success(KioskTransition(state=self.state, user=ident.user, message=message))

    def login(self, engine: SessionEngine, username: str, password: str) -> Outcome:
        with self._lock:
            return self._apply_identification(engine.authenticate_credentials(username, password))

    def scan(self, engine: SessionEngine, payload: str) -> Outcome:
        """Handle one scanned QR payload: a user badge or a project code."""
        with self._lock:
            parsed = parse_qr_payload(payload)
            if not parsed.ok:
                return parsed
            token = parsed.value
            if token.kind is QRKind.USER:
                return self._apply_identification(engine.authenticate_qr(payload))
            return self._start(engine, token.target_id, SessionTrigger.QR)

    def select_project(self, engine: SessionEngine, project_id: str) -> Outcome:
        with self._lock:
            return self._start(engine, project_id, SessionTrigger.MANUAL)

    def _start(self, engine: SessionEngine, project_id: str, trigger: SessionTrigger) -> Outcome:
        if self.state is not KioskState.LOGGED_IN:
            return Outcome.failure(ErrorCode.LOGIN_REQUIRED)

        user = self._current_user(engine)
        if user is None:
            return Outcome.failure(ErrorCode.UNKNOWN_OR_BLOCKED_USER, user_id=self.user_id)

        started = engine.start_session(user.id, project_id, trigger)
        if not started.ok:
            return started

        session: ActiveSession = started.value
        if keeps_login_after_start(user.role):
            self._move(KioskState.LOGGED_IN, user.id)
        else:
            self._move(KioskState.LOGGED_OUT)
        return Outcome.success(
            KioskTransition(
                state=self.state,
                user=user if self.state is KioskState.LOGGED_IN else None,
                started_session=session,
                message=f"Started work on {session.project_name}.",
            )
        )

    # Stop confirmation

    def confirm_stop(self, engine: SessionEngine) -> Outcome:
        with self._lock:
            if self.state is not KioskState.AWAITING_STOP_CONFIRMATION:
                return Outcome.failure(ErrorCode.NO_PENDING_STOP)
            stopped = engine.stop_session(self.user_id)
            if not stopped.ok:
                return stopped
            completed: CompletedSession = stopped.value
            self._move(KioskState.LOGGED_OUT)
            return Outcome.success(
                KioskTransition(
                    state=self.state,
                    completed_session=completed,
                    message=f"Session on {completed.project_name} stopped after {completed.duration_formatted}.",
                )
            )

    def cancel_stop(self, engine: SessionEngine) -> Outcome:
        """Dismiss the stop prompt; the running session is left untouched."""
        with self._lock:
            if self.state is not KioskState.AWAITING_STOP_CONFIRMATION:
                return Outcome.failure(ErrorCode.NO_PENDING_STOP)
            user = self._current_user(engine)
            if user is not None and not user.blocked and cancel_stop_logs_in(user.role):
                self._move(KioskState.LOGGED_IN, user.id)
                return Outcome.success(KioskTransition(state=self.state, user=user))
            self._move(KioskState.LOGGED_OUT)
            return Outcome.success(KioskTransition(state=self.state))

    def logout(self) -> Outcome:
        with self._lock:
            self._move(KioskState.LOGGED_OUT)
            return Outcome.success(KioskTransition(state=self.state))

    def snapshot(self, engine: SessionEngine) -> KioskTransition:
        """Current state with the logged-in user, if any."""
        with self._lock:
            return KioskTransition(state=self.state, user=self._current_user(engine))


class KioskRegistry:
    """In-process kiosks keyed by id; unknown ids start out logged out."""

    def __init__(self):
        self._guard = threading.Lock()
        self._kiosks: Dict[str, Kiosk] = {}

    def get(self, kiosk_id: str) -> Kiosk:
        with self._guard:
            kiosk = self._kiosks.get(kiosk_id)
            if kiosk is None:
                kiosk = self._kiosks[kiosk_id] = Kiosk(kiosk_id)
                log.info(f"Registered kiosk {kiosk_id}")
            return kiosk

    def reset(self):
        with self._guard:
            self._kiosks.clear()

    def __len__(self):
        return len(self._kiosks)
