from typing import List
from pydantic import BaseModel

from worktime.schemas.user import UserOut
from worktime.schemas.project import ProjectOut
from worktime.schemas.cost_center import CostCenterOut
from worktime.schemas.session import ActiveSessionOut, CompletedSessionOut


class InitialData(BaseModel):
    """Snapshot a freshly started client needs to render every view."""

    users: List[UserOut]
    projects: List[ProjectOut]
    cost_centers: List[CostCenterOut]
    active_sessions: List[ActiveSessionOut]
    completed_sessions: List[CompletedSessionOut]
