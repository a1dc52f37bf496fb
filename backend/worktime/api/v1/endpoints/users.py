from typing import List, Annotated
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from worktime.api.errors import http_error, not_found
from worktime.auth import get_password_hash, require_permission
from worktime.authorization import Permission
from worktime.constants.errors import ErrorCode
from worktime.database import get_db
from worktime.models.user import User
from worktime.schemas.user import UserCreate, UserOut, UserUpdate
from worktime.services.registry import new_user_id, resolve_cost_centers
from worktime.utils.audit_logger import create_audit_log

router = APIRouter()


def _cost_centers_or_404(db: Session, ids):
    centers, missing = resolve_cost_centers(db, ids)
    if missing:
        raise not_found(f"Cost center {missing[0]}")
    return centers


def _username_taken(db: Session, username: str, exclude_id: str = None) -> bool:
    query = db.query(User).filter(User.username == username)
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def _commit_or_conflict(db: Session, username: str, user_id: str):
    """Commit, turning a unique-constraint race into the matching 409."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if _username_taken(db, username, exclude_id=user_id):
            raise http_error(ErrorCode.DUPLICATE_USERNAME, username=username)
        raise http_error(ErrorCode.ALREADY_EXISTS, entity=f"User {user_id}")


@router.get("", response_model=List[UserOut])
async def read_users(
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_USERS))] = None
):
    """List all users."""
    return db.query(User).order_by(User.name).all()


@router.get("/{user_id}", response_model=UserOut)
async def read_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.VIEW_USERS))] = None
):
    """Look up one user, e.g. after scanning a badge."""
    user = db.get(User, user_id)
    if user is None:
        raise not_found("User")
    return user


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    payload: UserCreate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_USERS))] = None
):
    """Create a user; the id is generated when not supplied."""
    if _username_taken(db, payload.username):
        raise http_error(ErrorCode.DUPLICATE_USERNAME, username=payload.username)
    user_id = payload.id or new_user_id()
    if db.get(User, user_id) is not None:
        raise http_error(ErrorCode.ALREADY_EXISTS, entity=f"User {user_id}")

    user = User(
        id=user_id,
        name=payload.name,
        username=payload.username,
        hashed_password=get_password_hash(payload.password),
        role=payload.role.value,
        blocked=payload.blocked,
        can_select_project_manually=payload.can_select_project_manually,
        cost_centers=_cost_centers_or_404(db, payload.cost_center_ids),
    )
    db.add(user)
    _commit_or_conflict(db, payload.username, user_id)
    db.refresh(user)

    create_audit_log(
        db=db,
        request=request,
        action="user_created",
        entity_type="user",
        entity_id=user.id,
        user=current_user.username,
        details={"username": user.username, "role": user.role}
    )
    return user


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    request: Request,
    user_id: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_USERS))] = None
):
    """Update a user. The password only changes when a non-empty one is sent."""
    user = db.get(User, user_id)
    if user is None:
        raise not_found("User")

    update_data = payload.model_dump(exclude_unset=True)
    if update_data.get("username") and _username_taken(db, update_data["username"], exclude_id=user_id):
        raise http_error(ErrorCode.DUPLICATE_USERNAME, username=update_data["username"])

    password = update_data.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)
    if "cost_center_ids" in update_data:
        user.cost_centers = _cost_centers_or_404(db, update_data.pop("cost_center_ids") or [])
    if update_data.get("role") is not None:
        update_data["role"] = update_data["role"].value

    for key, value in update_data.items():
        if value is not None:
            setattr(user, key, value)

    _commit_or_conflict(db, user.username, user_id)
    db.refresh(user)

    fields = sorted(payload.model_dump(exclude_unset=True).keys())
    create_audit_log(
        db=db,
        request=request,
        action="user_updated",
        entity_type="user",
        entity_id=user.id,
        user=current_user.username,
        details={"updated_fields": [f for f in fields if f != "password"], "password_changed": bool(password)}
    )
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    request: Request,
    user_id: str,
    db: Session = Depends(get_db),
    current_user: Annotated[User, Depends(require_permission(Permission.MANAGE_USERS))] = None
):
    """Delete a user together with their running and completed sessions."""
    user = db.get(User, user_id)
    if user is None:
        raise not_found("User")
    username = user.username
    db.delete(user)
    db.commit()

    create_audit_log(
        db=db,
        request=request,
        action="user_deleted",
        entity_type="user",
        entity_id=user_id,
        user=current_user.username,
        details={"username": username}
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
