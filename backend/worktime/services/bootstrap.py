"""Startup data: the bootstrap administrator and optional demo records."""

import logging
from datetime import date

from sqlalchemy.orm import Session

from worktime.auth import get_password_hash
from worktime.authorization import Role
from worktime.config import settings
from worktime.models.cost_center import CostCenter
from worktime.models.project import Project
from worktime.models.user import User

log = logging.getLogger(__name__)

DEMO_COST_CENTERS = [
    {"id": 1, "name": "Vývoj"},
    {"id": 2, "name": "Marketing"},
    {"id": 3, "name": "Prevádzka"},
]

# (id, name, username, password, role, can_select_project_manually, cost centers)
DEMO_USERS = [
    ("user456", "Jane Smith (Manager)", "jane", "password456", Role.MANAGER, True, [1]),
    ("user101", "Sarah Wilson (Manager)", "sarah", "password101", Role.MANAGER, True, [2]),
    ("user123", "John Doe", "john", "password123", Role.EMPLOYEE, False, [1]),
    ("user789", "Mike Johnson", "mike", "password789", Role.EMPLOYEE, True, [1, 2]),
    ("user202", "Tom Brown", "tom", "password202", Role.EMPLOYEE, False, [3]),
]

DEMO_PROJECTS = [
    {"id": "proj001", "name": "Web Redesign", "budget": 15000, "deadline": date(2025, 12, 15), "closed": False, "estimated_hours": 200, "cost_center_id": 1},
    {"id": "proj002", "name": "Mobile App", "budget": 25000, "deadline": date(2025, 11, 30), "closed": False, "estimated_hours": 400, "cost_center_id": 1},
    {"id": "proj003", "name": "Marketing Kampaň", "budget": 8000, "deadline": date(2025, 10, 20), "closed": True, "estimated_hours": 80, "cost_center_id": 2},
    {"id": "proj004", "name": "DB Optimalizácia", "budget": 12000, "deadline": date(2025, 12, 1), "closed": False, "estimated_hours": 150, "cost_center_id": 3},
]

ADMIN_ID = "admin001"


def ensure_admin(db: Session) -> User:
    """Create the configured administrator if no admin account exists yet."""
    admin = db.query(User).filter(User.role == Role.ADMIN.value).first()
    if admin:
        return admin

    admin = User(
        id=ADMIN_ID,
        name=settings.admin_name,
        username=settings.admin_username,
        hashed_password=get_password_hash(settings.admin_password),
        role=Role.ADMIN.value,
        can_select_project_manually=True,
    )
    db.add(admin)
    db.commit()
    log.warning(f"Created bootstrap administrator '{settings.admin_username}'; change its password")
    return admin


def seed_demo_data(db: Session) -> bool:
    """Insert demo cost centers, users and projects into an empty registry."""
    if db.query(Project).count() or db.query(CostCenter).count():
        log.info("Registry already populated, skipping demo data")
        return False

    centers = {}
    for entry in DEMO_COST_CENTERS:
        centers[entry["id"]] = CostCenter(**entry)
        db.add(centers[entry["id"]])

    for user_id, name, username, password, role, manual, center_ids in DEMO_USERS:
        if db.query(User).filter(User.username == username).first():
            log.debug(f"Demo user '{username}' exists, leaving it alone")
            continue
        db.add(
            User(
                id=user_id,
                name=name,
                username=username,
                hashed_password=get_password_hash(password),
                role=role.value,
                can_select_project_manually=manual,
                cost_centers=[centers[c] for c in center_ids],
            )
        )

    for entry in DEMO_PROJECTS:
        db.add(Project(**entry))

    db.commit()
    log.info(f"Seeded {len(DEMO_COST_CENTERS)} cost centers, {len(DEMO_USERS)} users, {len(DEMO_PROJECTS)} projects")
    return True
