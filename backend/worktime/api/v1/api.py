from fastapi import APIRouter

from worktime.api.v1.endpoints import (
    active_sessions,
    audit_logs,
    auth,
    cost_centers,
    evaluation,
    initial_data,
    kiosk,
    projects,
    sessions,
    users,
)

api_router = APIRouter()
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(cost_centers.router, prefix="/cost-centers", tags=["cost-centers"])
api_router.include_router(active_sessions.router, prefix="/active-sessions", tags=["active-sessions"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(evaluation.router, prefix="/evaluation", tags=["evaluation"])
api_router.include_router(initial_data.router, prefix="/initial-data", tags=["initial-data"])
api_router.include_router(kiosk.router, prefix="/kiosk", tags=["kiosk"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit-logs"])
