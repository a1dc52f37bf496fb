from typing import Optional, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from worktime.utils.timekeeping import as_utc, elapsed_seconds, format_elapsed


class StartSessionRequest(BaseModel):
    user_id: Optional[str] = Field(None, description="Defaults to the authenticated user")
    project_id: str = Field(..., min_length=1)
    trigger: Literal["qr", "manual"] = "qr"


class StopSessionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class ActiveSessionOut(BaseModel):
    id: int
    user_id: str
    user_name: str
    project_id: str
    project_name: str
    cost_center_id: Optional[int] = None
    cost_center_name: Optional[str] = None
    start_time: datetime
    elapsed_seconds: int = 0
    elapsed_formatted: str = "00:00:00"

    model_config = ConfigDict(from_attributes=True)

    @field_validator("start_time")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    @classmethod
    def from_session(cls, session, now: Optional[datetime] = None) -> "ActiveSessionOut":
        out = cls.model_validate(session)
        out.elapsed_seconds = elapsed_seconds(out.start_time, now)
        out.elapsed_formatted = format_elapsed(out.elapsed_seconds)
        return out


class CompletedSessionOut(BaseModel):
    id: int
    timestamp: datetime
    employee_id: str
    employee_name: str
    project_id: str
    project_name: str
    duration_minutes: int
    duration_formatted: str

    model_config = ConfigDict(from_attributes=True)

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)
