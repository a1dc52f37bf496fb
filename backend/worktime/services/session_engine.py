"""
Session lifecycle: identifying users, opening active sessions and closing
them into completed-session records.

The engine is the only writer of ``active_sessions`` and
``completed_sessions``. A user never holds more than one active session:
start and stop are serialized per user by ``UserLockRegistry`` and the
``uq_active_sessions_user_id`` constraint rejects anything that slips past
the lock (e.g. a second worker process).
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from worktime.auth import verify_password
from worktime.constants.errors import ErrorCode
from worktime.models.active_session import ActiveSession
from worktime.models.completed_session import CompletedSession
from worktime.models.project import Project
from worktime.models.user import User
from worktime.services.outcome import Outcome
from worktime.utils.timekeeping import as_utc, format_duration, minutes_between, utcnow

log = logging.getLogger(__name__)

USER_PREFIX = "USER_ID:"
PROJECT_PREFIX = "PROJECT_ID:"


class QRKind(str, Enum):
    USER = "user"
    PROJECT = "project"


class QRToken(BaseModel):
    kind: QRKind
    target_id: str


class LoginAction(str, Enum):
    LOGIN = "login"
    CONFIRM_STOP = "confirm_stop"


class SessionTrigger(str, Enum):
    QR = "qr"
    MANUAL = "manual"


class Identification(BaseModel):
    """A recognised user and what the kiosk should do with them next."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    user: User
    action: LoginAction


def parse_qr_payload(payload: Optional[str]) -> Outcome:
    """Split ``USER_ID:<id>`` / ``PROJECT_ID:<id>`` into a ``QRToken``."""
    text = (payload or "").strip()
    for prefix, kind in ((USER_PREFIX, QRKind.USER), (PROJECT_PREFIX, QRKind.PROJECT)):
        if text.startswith(prefix):
            target_id = text[len(prefix):].strip()
            if target_id:
                return Outcome.success(QRToken(kind=kind, target_id=target_id))
            break
    return Outcome.failure(ErrorCode.UNRECOGNIZED_QR_FORMAT, payload=text or "<empty>")


class UserLockRegistry:
    """One lock per user id, created on first use."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, user_id: str):
        with self._guard:
            lock = self._locks.setdefault(user_id, threading.Lock())
        with lock:
            yield


class SessionEngine:
    """
    Opens and closes work sessions against a database session.

    Args:
        db: SQLAlchemy session used for every read and write
        locks: Per-user lock registry shared by all engines in the process
        clock: Returns the current UTC instant; tests inject a fake clock
    """

    def __init__(
        self,
        db: Session,
        locks: Optional[UserLockRegistry] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.locks = locks or UserLockRegistry()
        self.clock = clock

    # Lookups

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def active_session_for(self, user_id: str) -> Optional[ActiveSession]:
        return self.db.query(ActiveSession).filter(ActiveSession.user_id == user_id).first()

    def list_active_sessions(self, cost_center_ids: Optional[Iterable[int]] = None) -> List[ActiveSession]:
        """Running sessions, newest first; optionally limited to projects in ``cost_center_ids``."""
        query = self.db.query(ActiveSession).options(
            joinedload(ActiveSession.project).joinedload(Project.cost_center)
        )
        if cost_center_ids is not None:
            ids = list(cost_center_ids)
            if not ids:
                return []
            query = query.join(Project, ActiveSession.project_id == Project.id).filter(Project.cost_center_id.in_(ids))
        return query.order_by(ActiveSession.start_time.desc(), ActiveSession.id.desc()).all()

    # Identification

    def identify(self, user: User) -> Outcome:
        """Decide between an ordinary login and a stop confirmation."""
        if self.active_session_for(user.id) is not None:
            log.debug(f"User {user.id} has a running session, asking for stop confirmation")
            return Outcome.success(Identification(user=user, action=LoginAction.CONFIRM_STOP))
        return Outcome.success(Identification(user=user, action=LoginAction.LOGIN))

    def authenticate_credentials(self, username: str, password: str) -> Outcome:
        user = self.db.query(User).filter(User.username == username).first()
        if user is None or user.blocked or not self._password_matches(user, password):
            log.info(f"Rejected credential login for username '{username}'")
            return Outcome.failure(ErrorCode.INVALID_CREDENTIALS)
        return self.identify(user)

    def authenticate_qr(self, payload: str) -> Outcome:
        parsed = parse_qr_payload(payload)
        if not parsed.ok:
            return parsed
        token: QRToken = parsed.value
        if token.kind is QRKind.PROJECT:
            return Outcome.failure(ErrorCode.LOGIN_REQUIRED)
        user = self.get_user(token.target_id)
        if user is None or user.blocked:
            log.info(f"Rejected QR login for user id '{token.target_id}'")
            return Outcome.failure(ErrorCode.UNKNOWN_OR_BLOCKED_USER, user_id=token.target_id)
        return self.identify(user)

    def _password_matches(self, user: User, password: str) -> bool:
        try:
            return verify_password(password, user.hashed_password)
        except ValueError as e:
            log.warning(f"Stored password for user {user.id} is not a recognised hash: {e}")
            return False

    # Lifecycle

    @staticmethod
    def can_select_manually(user: User, project: Project) -> bool:
        return bool(user.can_select_project_manually) and project.cost_center_id in set(user.cost_center_ids)

    def start_session(self, user_id: str, project_id: str, trigger=SessionTrigger.QR) -> Outcome:
        """Open a session for ``user_id`` on ``project_id``; value is the new ``ActiveSession``."""
        trigger = SessionTrigger(trigger)

        user = self.get_user(user_id)
        if user is None or user.blocked:
            return Outcome.failure(ErrorCode.UNKNOWN_OR_BLOCKED_USER, user_id=user_id)

        project = self.db.get(Project, project_id)
        if project is None:
            return Outcome.failure(ErrorCode.UNKNOWN_PROJECT, project_id=project_id)
        if project.closed:
            log.info(f"Refused session for {user_id}: project {project_id} is closed")
            return Outcome.failure(ErrorCode.PROJECT_CLOSED, project_id=project_id)
        if trigger is SessionTrigger.MANUAL and not self.can_select_manually(user, project):
            return Outcome.failure(ErrorCode.PROJECT_NOT_SELECTABLE, project_id=project_id, user_id=user_id)

        with self.locks.hold(user_id):
            if self.active_session_for(user_id) is not None:
                return Outcome.failure(ErrorCode.SESSION_ALREADY_ACTIVE, user_id=user_id)

            session = ActiveSession(
                user_id=user.id,
                user_name=user.name,
                project_id=project.id,
                project_name=project.name,
                start_time=self.clock(),
            )
            self.db.add(session)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                log.info(f"Concurrent start for user {user_id} rejected by unique constraint")
                return Outcome.failure(ErrorCode.SESSION_ALREADY_ACTIVE, user_id=user_id)
            self.db.refresh(session)

        log.info(f"Started session #{session.id} for {user.id} on {project.id} via {trigger.value}")
        return Outcome.success(session)

    def stop_session(self, user_id: str) -> Outcome:
        """Close the user's running session; value is the new ``CompletedSession``."""
        with self.locks.hold(user_id):
            active = self.active_session_for(user_id)
            if active is None:
                return Outcome.failure(ErrorCode.NO_ACTIVE_SESSION, user_id=user_id)

            start_time = as_utc(active.start_time)
            duration = minutes_between(start_time, self.clock())
            if duration < 0:
                log.warning(f"Session #{active.id} for {user_id} ends before it started ({duration} min); recording 0")
                duration = 0

            completed = CompletedSession(
                timestamp=start_time,
                employee_id=active.user_id,
                employee_name=active.user_name,
                project_id=active.project_id,
                project_name=active.project_name,
                duration_minutes=duration,
                duration_formatted=format_duration(duration),
            )
            try:
                self.db.add(completed)
                self.db.delete(active)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            self.db.refresh(completed)

        log.info(f"Stopped session for {user_id} on {completed.project_id}: {completed.duration_formatted}")
        return Outcome.success(completed)
