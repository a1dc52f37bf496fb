"""Role model and every permission decision made by the application.

Endpoints and the kiosk never compare role strings themselves; they ask
this module.
"""

from enum import Enum
from typing import FrozenSet, Optional, Union


class Role(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class Permission(str, Enum):
    MANAGE_USERS = "manage_users"
    VIEW_USERS = "view_users"
    MANAGE_PROJECTS = "manage_projects"
    VIEW_PROJECTS = "view_projects"
    MANAGE_COST_CENTERS = "manage_cost_centers"
    VIEW_COST_CENTERS = "view_cost_centers"
    TRACK_TIME = "track_time"
    TRACK_TIME_FOR_OTHERS = "track_time_for_others"
    VIEW_ACTIVE_SESSIONS = "view_active_sessions"
    VIEW_COMPLETED_SESSIONS = "view_completed_sessions"
    RECORD_COMPLETED_SESSIONS = "record_completed_sessions"
    VIEW_EVALUATION = "view_evaluation"
    EXPORT_SESSIONS = "export_sessions"
    VIEW_INITIAL_DATA = "view_initial_data"
    VIEW_AUDIT_LOGS = "view_audit_logs"


_EMPLOYEE: FrozenSet[Permission] = frozenset({
    Permission.VIEW_PROJECTS,
    Permission.TRACK_TIME,
    Permission.VIEW_ACTIVE_SESSIONS,
})

_MANAGER: FrozenSet[Permission] = _EMPLOYEE | {
    Permission.VIEW_USERS,
    Permission.MANAGE_PROJECTS,
    Permission.VIEW_COST_CENTERS,
    Permission.TRACK_TIME_FOR_OTHERS,
    Permission.VIEW_COMPLETED_SESSIONS,
    Permission.VIEW_EVALUATION,
    Permission.EXPORT_SESSIONS,
    Permission.VIEW_INITIAL_DATA,
}

_ADMIN: FrozenSet[Permission] = frozenset(Permission)

ROLE_PERMISSIONS = {
    Role.EMPLOYEE: _EMPLOYEE,
    Role.MANAGER: _MANAGER,
    Role.ADMIN: _ADMIN,
}


def as_role(role: Union[Role, str]) -> Role:
    return role if isinstance(role, Role) else Role(role)


def authorize(role: Union[Role, str], permission: Permission) -> bool:
    """Return True when ``role`` grants ``permission``."""
    return permission in ROLE_PERMISSIONS[as_role(role)]


def is_privileged(role: Union[Role, str]) -> bool:
    return as_role(role) in (Role.MANAGER, Role.ADMIN)


def can_act_for(actor, user_id: str) -> bool:
    """Whether ``actor`` may start or stop sessions on behalf of ``user_id``."""
    if actor.id == user_id:
        return authorize(actor.role, Permission.TRACK_TIME)
    return authorize(actor.role, Permission.TRACK_TIME_FOR_OTHERS)


def keeps_login_after_start(role: Union[Role, str]) -> bool:
    """Employees are logged out of the kiosk once their shift starts."""
    return is_privileged(role)


def cancel_stop_logs_in(role: Union[Role, str]) -> bool:
    """Dismissing the stop prompt logs admins and managers in instead."""
    return is_privileged(role)


def visible_cost_center_ids(user) -> Optional[FrozenSet[int]]:
    """Cost centers whose projects ``user`` may see; None means all of them."""
    if as_role(user.role) is Role.ADMIN:
        return None
    return frozenset(user.cost_center_ids)
