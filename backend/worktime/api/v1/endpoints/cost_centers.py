from typing import List, Annotated
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from worktime.api.errors import http_error, not_found
from worktime.auth import require_permission
from worktime.authorization import Permission
from worktime.constants.errors import ErrorCode
from worktime.database import get_db
from worktime.models.cost_center import CostCenter
from worktime.models.user import User
from worktime.schemas.cost_center import CostCenterCreate, CostCenterOut, CostCenterUpdate
from worktime.utils.audit_logger import create_audit_log

router = APIRouter()


def _name_taken(db: Session, name: str, exclude_id: int = None) -> bool:
    query = db.query(CostCenter).filter(CostCenter.name == name)
    if exclude_id is not None:
        query = query.filter(CostCenter.id != exclude_id)
    return query.first() is not None


@router.get("", response_model=List[CostCenterOut])
async def read_cost_centers(
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_COST_CENTERS))] = None
):
    return db.query(CostCenter).order_by(CostCenter.name).all()


@router.post("", response_model=CostCenterOut, status_code=status.HTTP_201_CREATED)
async def create_cost_center(
    request: Request,
    payload: CostCenterCreate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_COST_CENTERS))] = None
):
    if _name_taken(db, payload.name):
        raise http_error(ErrorCode.ALREADY_EXISTS, entity=f"Cost center '{payload.name}'")
    center = CostCenter(name=payload.name)
    db.add(center)
    db.commit()
    db.refresh(center)

    create_audit_log(
        db=db,
        request=request,
        action="cost_center_created",
        entity_type="cost_center",
        entity_id=center.id,
        user=current_user.username,
        details={"name": center.name}
    )
    return center


@router.put("/{center_id}", response_model=CostCenterOut)
async def update_cost_center(
    request: Request,
    center_id: int,
    payload: CostCenterUpdate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_COST_CENTERS))] = None
):
    center = db.get(CostCenter, center_id)
    if center is None:
        raise not_found("Cost center")
    if _name_taken(db, payload.name, exclude_id=center_id):
        raise http_error(ErrorCode.ALREADY_EXISTS, entity=f"Cost center '{payload.name}'")
    old_name = center.name
    center.name = payload.name
    db.commit()
    db.refresh(center)

    create_audit_log(
        db=db,
        request=request,
        action="cost_center_updated",
        entity_type="cost_center",
        entity_id=center.id,
        user=current_user.username,
        details={"old_name": old_name, "name": center.name}
    )
    return center


@router.delete("/{center_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cost_center(
    request: Request,
    center_id: int,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_COST_CENTERS))] = None
):
    """Delete a cost center; its projects are kept without one and memberships are dropped."""
    center = db.get(CostCenter, center_id)
    if center is None:
        raise not_found("Cost center")
    name = center.name
    db.delete(center)
    db.commit()

    create_audit_log(
        db=db,
        request=request,
        action="cost_center_deleted",
        entity_type="cost_center",
        entity_id=center_id,
        user=current_user.username,
        details={"name": name}
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
