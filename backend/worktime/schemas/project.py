from typing import Optional
from datetime import date
from pydantic import BaseModel, ConfigDict, Field


class ProjectBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    budget: float = Field(0, ge=0, description="Total project budget")
    deadline: Optional[date] = None
    estimated_hours: Optional[float] = Field(None, gt=0, description="Planned effort in hours")
    cost_center_id: Optional[int] = None


class ProjectCreate(ProjectBase):
    id: Optional[str] = Field(None, max_length=64, description="Identifier printed in the project's QR code; generated when omitted")
    closed: bool = False


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    budget: Optional[float] = Field(None, ge=0)
    deadline: Optional[date] = None
    closed: Optional[bool] = None
    estimated_hours: Optional[float] = Field(None, gt=0)
    cost_center_id: Optional[int] = None


class ProjectOut(ProjectBase):
    id: str
    closed: bool
    cost_center_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
