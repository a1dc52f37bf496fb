from typing import Optional
from pydantic import BaseModel, Field

from worktime.schemas.user import UserOut
from worktime.schemas.session import ActiveSessionOut, CompletedSessionOut


class KioskScanRequest(BaseModel):
    payload: str = Field(..., description="Decoded QR text, e.g. USER_ID:user123 or PROJECT_ID:proj001")


class KioskLoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class KioskSelectProjectRequest(BaseModel):
    project_id: str = Field(..., min_length=1)


class KioskView(BaseModel):
    kiosk_id: str
    state: str
    user: Optional[UserOut] = None
    pending_session: Optional[ActiveSessionOut] = None
    started_session: Optional[ActiveSessionOut] = None
    completed_session: Optional[CompletedSessionOut] = None
    message: Optional[str] = None
    access_token: Optional[str] = None
