"""Helpers shared by the user/project registry endpoints and seeding."""

import uuid
from typing import Iterable, List, Tuple

from sqlalchemy.orm import Session

from worktime.models.cost_center import CostCenter


def new_user_id() -> str:
    return f"user{uuid.uuid4().hex[:8]}"


def new_project_id() -> str:
    return f"proj{uuid.uuid4().hex[:8]}"


def resolve_cost_centers(db: Session, ids: Iterable[int]) -> Tuple[List[CostCenter], List[int]]:
    """Load cost centers by id; returns ``(found, missing_ids)``."""
    wanted = sorted(set(ids))
    if not wanted:
        return [], []
    found = db.query(CostCenter).filter(CostCenter.id.in_(wanted)).all()
    known = {c.id for c in found}
    return found, [i for i in wanted if i not in known]
