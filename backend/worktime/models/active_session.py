"""Active session model for in-progress work intervals."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from worktime.database import Base


class ActiveSession(Base):
    """Open work interval; at most one row per user."""

    __tablename__ = "active_sessions"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    # Names captured when the session was opened
    user_name = Column(String(255), nullable=False)
    project_name = Column(String(255), nullable=False)

    start_time = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    user = relationship("User", back_populates="active_session")
    project = relationship("Project", back_populates="active_sessions")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_active_sessions_user_id"),
    )

    @property
    def cost_center_id(self):
        return self.project.cost_center_id if self.project else None

    @property
    def cost_center_name(self):
        return self.project.cost_center_name if self.project else None

    def __repr__(self):
        return f"<ActiveSession(id={self.id}, user='{self.user_id}', project='{self.project_id}')>"
