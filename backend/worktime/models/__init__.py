"""Database models."""

from worktime.models.user import User, user_cost_centers
from worktime.models.cost_center import CostCenter
from worktime.models.project import Project
from worktime.models.active_session import ActiveSession
from worktime.models.completed_session import CompletedSession
from worktime.models.audit_log import AuditLog

__all__ = [
    "User",
    "user_cost_centers",
    "CostCenter",
    "Project",
    "ActiveSession",
    "CompletedSession",
    "AuditLog",
]
