from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from worktime.api.deps import get_clock
from worktime.auth import create_access_token, get_password_hash, pwd_context
from worktime.database import Base, build_engine, get_db
from worktime.main import app
from worktime.models import CompletedSession, CostCenter, Project, User
from worktime.services.session_engine import SessionEngine, UserLockRegistry
from worktime.utils.timekeeping import format_duration

# Fast hashes for tests
pwd_context.update(bcrypt__rounds=4)

engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

START = datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


# Override dependency for test database session
def override_get_db() -> Session:
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def schema():
    import worktime.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    app.state.kiosks.reset()


@pytest.fixture
def db() -> Session:
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(clock) -> TestClient:
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def session_engine(db, clock) -> SessionEngine:
    return SessionEngine(db, locks=UserLockRegistry(), clock=clock)


def make_user(db, user_id, username, role="employee", centers=(), manual=False, blocked=False, password=None, name=None):
    user = User(
        id=user_id,
        name=name or username.capitalize(),
        username=username,
        hashed_password=get_password_hash(password or f"{username}-pw"),
        role=role,
        blocked=blocked,
        can_select_project_manually=manual,
        cost_centers=list(centers),
    )
    db.add(user)
    return user


@pytest.fixture
def seeded(db):
    """
    Two cost centers, one user per role plus a blocked and a manual-select
    employee, two open projects and a closed one.
    """
    dev = CostCenter(id=1, name="Vývoj")
    marketing = CostCenter(id=2, name="Marketing")
    db.add_all([dev, marketing])

    admin = make_user(db, "admin001", "admin", role="admin", password="admin123", name="Admin User")
    manager = make_user(db, "mgr1", "jane", role="manager", centers=[dev], manual=True, name="Jane Smith")
    employee = make_user(db, "U1", "john", centers=[dev], password="password123", name="John Doe")
    picker = make_user(db, "U2", "mike", centers=[dev], manual=True, name="Mike Johnson")
    blocked = make_user(db, "U3", "tom", centers=[dev], blocked=True, name="Tom Brown")
    outsider = make_user(db, "U4", "sarah", role="manager", centers=[marketing], name="Sarah Wilson")

    p1 = Project(id="P1", name="Web Redesign", budget=1000, estimated_hours=10, deadline=date(2024, 12, 31), cost_center_id=1)
    p2 = Project(id="P2", name="Campaign", budget=500, estimated_hours=None, cost_center_id=2)
    p3 = Project(id="P3", name="Legacy Cleanup", budget=200, estimated_hours=5, closed=True, cost_center_id=1)
    db.add_all([p1, p2, p3])
    db.commit()

    return SimpleNamespace(
        dev=dev, marketing=marketing,
        admin=admin, manager=manager, employee=employee, picker=picker, blocked=blocked, outsider=outsider,
        p1=p1, p2=p2, p3=p3,
    )


def token_headers(user) -> dict:
    token = create_access_token({"sub": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers(seeded):
    """Bearer headers keyed by role name."""
    return {
        "admin": token_headers(seeded.admin),
        "manager": token_headers(seeded.manager),
        "employee": token_headers(seeded.employee),
        "picker": token_headers(seeded.picker),
        "outsider": token_headers(seeded.outsider),
    }


def add_completed(db, user, project, started_at, minutes):
    """Insert a ledger row directly (for evaluation and export fixtures)."""
    row = CompletedSession(
        timestamp=started_at,
        employee_id=user.id,
        employee_name=user.name,
        project_id=project.id,
        project_name=project.name,
        duration_minutes=minutes,
        duration_formatted=format_duration(minutes),
    )
    db.add(row)
    db.commit()
    return row
