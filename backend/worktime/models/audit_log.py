"""Audit log model for tracking session and administration activity."""

from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from worktime.database import Base


class AuditLog(Base):
    """Audit trail of logins, session starts/stops and admin edits."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    # Action details
    action = Column(String(100), nullable=False)  # 'session_started', 'login_failed', 'project_updated', ...
    entity_type = Column(String(50), nullable=True)  # 'session', 'user', 'project', 'cost_center'
    entity_id = Column(String(64), nullable=True)

    # User and context
    user = Column(String(100), nullable=True)
    details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    __table_args__ = (
        Index("idx_audit_logs_action", "action"),
        Index("idx_audit_logs_ip_created", "ip_address", "created_at"),
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', entity='{self.entity_type}')>"
