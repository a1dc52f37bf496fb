from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel


class AuditLogBase(BaseModel):
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    user: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class AuditLogInDB(AuditLogBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogStats(BaseModel):
    total_logs: int
    access_logs: int
    session_logs: int
    oldest_access_log: Optional[str] = None
    oldest_session_log: Optional[str] = None


