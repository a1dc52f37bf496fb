from typing import Optional
from pydantic import BaseModel, Field

from worktime.schemas.user import UserOut


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    user_id: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(Token):
    user: UserOut
    pending_stop: bool = Field(False, description="User already has a running session and is awaiting stop confirmation")
