from datetime import date
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from worktime.api.errors import not_found
from worktime.auth import require_permission
from worktime.authorization import Permission, visible_cost_center_ids
from worktime.database import get_db
from worktime.models.user import User
from worktime.schemas.evaluation import EvaluationReport, ProjectEvaluationDetail
from worktime.services.evaluation import EvaluationService
from worktime.services.export import export_filename, project_sessions_to_csv

router = APIRouter()


def _project_detail(db: Session, user: User, project_id: str, start_date, end_date) -> ProjectEvaluationDetail:
    detail = EvaluationService(db).project_detail(project_id, start_date, end_date)
    scope = visible_cost_center_ids(user)
    if detail is None or (scope is not None and detail.cost_center_id not in scope):
        raise not_found("Project")
    return detail


@router.get("", response_model=EvaluationReport)
async def read_evaluation(
    start_date: Optional[date] = Query(None, description="First day of the window (inclusive)"),
    end_date: Optional[date] = Query(None, description="Last day of the window (inclusive)"),
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_EVALUATION))] = None
):
    """
    Per-project time, cost and progress figures.

    Without a window every visible project is listed. With a window, only
    projects that have sessions inside it are listed; cost per hour,
    progress and variance always cover the project's whole history.
    """
    return EvaluationService(db).report(start_date, end_date, visible_cost_center_ids(current_user))


@router.get("/projects/{project_id}", response_model=ProjectEvaluationDetail)
async def read_project_evaluation(
    project_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_EVALUATION))] = None
):
    """Evaluation of one project with its in-window sessions."""
    return _project_detail(db, current_user, project_id, start_date, end_date)


@router.get("/projects/{project_id}/export")
async def export_project_sessions(
    project_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.EXPORT_SESSIONS))] = None
):
    """CSV of one project's in-window sessions."""
    detail = _project_detail(db, current_user, project_id, start_date, end_date)
    filename = export_filename("projekt", f"{detail.name} relacie")
    return Response(
        content=project_sessions_to_csv(detail.sessions),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
