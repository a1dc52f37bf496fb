from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from worktime.authorization import Role


class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=100)
    role: Role = Role.EMPLOYEE
    blocked: bool = False
    can_select_project_manually: bool = False
    cost_center_ids: List[int] = Field(default_factory=list)


class UserCreate(UserBase):
    id: Optional[str] = Field(None, max_length=64, description="Identifier printed in the user's QR code; generated when omitted")
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, description="Only applied when non-empty")
    role: Optional[Role] = None
    blocked: Optional[bool] = None
    can_select_project_manually: Optional[bool] = None
    cost_center_ids: Optional[List[int]] = None


class UserOut(UserBase):
    id: str

    model_config = ConfigDict(from_attributes=True)
