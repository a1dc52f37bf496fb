from typing import List, Annotated, Optional
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from worktime.api.errors import forbidden, http_error, not_found
from worktime.auth import require_permission
from worktime.authorization import Permission, visible_cost_center_ids
from worktime.constants.errors import ErrorCode
from worktime.database import get_db
from worktime.models.cost_center import CostCenter
from worktime.models.project import Project
from worktime.models.user import User
from worktime.schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from worktime.services.registry import new_project_id
from worktime.utils.audit_logger import create_audit_log

router = APIRouter()


def _visible(project: Project, user: User) -> bool:
    scope = visible_cost_center_ids(user)
    return scope is None or project.cost_center_id in scope


def _get_visible_project(db: Session, project_id: str, user: User) -> Project:
    project = db.get(Project, project_id)
    if project is None or not _visible(project, user):
        raise not_found("Project")
    return project


def _check_cost_center(db: Session, cost_center_id: Optional[int], user: User):
    if cost_center_id is None:
        scope = visible_cost_center_ids(user)
        if scope is not None:
            raise forbidden()
        return
    if db.get(CostCenter, cost_center_id) is None:
        raise not_found(f"Cost center {cost_center_id}")
    scope = visible_cost_center_ids(user)
    if scope is not None and cost_center_id not in scope:
        raise forbidden()


def _audit(db: Session, request: Request, action: str, project_id: str, user: User, details: dict = None):
    create_audit_log(
        db=db,
        request=request,
        action=action,
        entity_type="project",
        entity_id=project_id,
        user=user.username,
        details=details,
    )


@router.get("", response_model=List[ProjectOut])
async def read_projects(
    include_closed: bool = Query(True, description="Also list closed projects"),
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_PROJECTS))] = None
):
    """List projects in the caller's cost centers (all projects for admins)."""
    query = db.query(Project)
    scope = visible_cost_center_ids(current_user)
    if scope is not None:
        query = query.filter(Project.cost_center_id.in_(list(scope)))
    if not include_closed:
        query = query.filter(Project.closed.is_(False))
    return query.order_by(Project.name).all()


@router.get("/{project_id}", response_model=ProjectOut)
async def read_project(
    project_id: str,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_PROJECTS))] = None
):
    return _get_visible_project(db, project_id, current_user)


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: Request,
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_PROJECTS))] = None
):
    """Create a project; the id is generated when not supplied."""
    _check_cost_center(db, payload.cost_center_id, current_user)
    project_id = payload.id or new_project_id()
    if db.get(Project, project_id) is not None:
        raise http_error(ErrorCode.ALREADY_EXISTS, entity=f"Project {project_id}")

    project = Project(id=project_id, **payload.model_dump(exclude={"id"}))
    db.add(project)
    db.commit()
    db.refresh(project)

    _audit(db, request, "project_created", project.id, current_user, {"name": project.name})
    return project


@router.put("/{project_id}", response_model=ProjectOut)
async def update_project(
    request: Request,
    project_id: str,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_PROJECTS))] = None
):
    """Update a project. Running and completed sessions keep the name they were recorded with."""
    project = _get_visible_project(db, project_id, current_user)
    update_data = payload.model_dump(exclude_unset=True)
    if "cost_center_id" in update_data:
        _check_cost_center(db, update_data["cost_center_id"], current_user)

    for key, value in update_data.items():
        if value is None and key not in ("deadline", "estimated_hours", "cost_center_id"):
            continue
        setattr(project, key, value)

    db.commit()
    db.refresh(project)

    _audit(db, request, "project_updated", project.id, current_user, {"updated_fields": sorted(update_data.keys())})
    return project


@router.put("/{project_id}/toggle-status", response_model=ProjectOut)
async def toggle_project_status(
    request: Request,
    project_id: str,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_PROJECTS))] = None
):
    """Close an open project or reopen a closed one."""
    project = _get_visible_project(db, project_id, current_user)
    project.closed = not project.closed
    db.commit()
    db.refresh(project)

    _audit(db, request, "project_status_toggled", project.id, current_user, {"closed": project.closed})
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    request: Request,
    project_id: str,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_PROJECTS))] = None
):
    """Delete a project and every session recorded against it."""
    project = _get_visible_project(db, project_id, current_user)
    name = project.name
    db.delete(project)
    db.commit()

    _audit(db, request, "project_deleted", project_id, current_user, {"name": name})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
