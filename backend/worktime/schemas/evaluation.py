from typing import Dict, List, Optional, Literal
from datetime import date, datetime
from pydantic import BaseModel, Field

from worktime.schemas.session import CompletedSessionOut


class UserBreakdown(BaseModel):
    name: str
    total_time: int = Field(0, description="Minutes in the window")
    sessions: int = 0


class ProjectEvaluation(BaseModel):
    project_id: str
    name: str
    budget: float
    deadline: Optional[date] = None
    closed: bool
    estimated_hours: Optional[float] = None
    cost_center_id: Optional[int] = None

    # Window metrics
    total_time: int = Field(..., description="Minutes tracked in the window")
    unique_users: int
    session_count: int
    average_session_minutes: float
    user_breakdown: Dict[str, UserBreakdown]

    # Lifetime metrics, never windowed
    total_lifetime_hours: float
    cost_per_hour: float
    work_progress_percentage: Optional[float] = Field(None, description="Raw, may exceed 100")
    progress_display_percentage: Optional[float] = Field(None, description="Clamped to 0-100")
    time_variance: Optional[float] = Field(None, description="Hours over (+) or under (-) the estimate")
    variance_status: Optional[Literal["over", "under", "on_plan"]] = None


class ProjectEvaluationDetail(ProjectEvaluation):
    sessions: List[CompletedSessionOut] = Field(default_factory=list)


class EvaluationReport(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    windowed: bool
    total_tracked_minutes: int
    projects: List[ProjectEvaluation]
