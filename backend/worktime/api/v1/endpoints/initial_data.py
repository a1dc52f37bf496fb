from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from worktime.api.deps import get_session_engine
from worktime.auth import require_permission
from worktime.authorization import Permission, visible_cost_center_ids
from worktime.database import get_db
from worktime.models.cost_center import CostCenter
from worktime.models.project import Project
from worktime.models.user import User
from worktime.schemas.bootstrap import InitialData
from worktime.schemas.cost_center import CostCenterOut
from worktime.schemas.project import ProjectOut
from worktime.schemas.session import ActiveSessionOut, CompletedSessionOut
from worktime.schemas.user import UserOut
from worktime.services.ledger import list_completed_sessions
from worktime.services.session_engine import SessionEngine

router = APIRouter()


@router.get("", response_model=InitialData)
async def read_initial_data(
    db: Session = Depends(get_db),
    engine: SessionEngine = Depends(get_session_engine),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_INITIAL_DATA))] = None
):
    """Everything a freshly loaded dashboard needs, scoped to the caller's cost centers."""
    scope = visible_cost_center_ids(current_user)

    projects = db.query(Project)
    if scope is not None:
        projects = projects.filter(Project.cost_center_id.in_(list(scope)))

    now = engine.clock()
    return InitialData(
        users=[UserOut.model_validate(u) for u in db.query(User).order_by(User.name).all()],
        projects=[ProjectOut.model_validate(p) for p in projects.order_by(Project.name).all()],
        cost_centers=[CostCenterOut.model_validate(c) for c in db.query(CostCenter).order_by(CostCenter.name).all()],
        active_sessions=[ActiveSessionOut.from_session(s, now) for s in engine.list_active_sessions(scope)],
        completed_sessions=[CompletedSessionOut.model_validate(s) for s in list_completed_sessions(db, cost_center_ids=scope)],
    )
