"""Completed session model, the append-only work ledger."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from worktime.database import Base


class CompletedSession(Base):
    """Immutable record of a stopped work session."""

    __tablename__ = "completed_sessions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Start of the work, not the moment it was stopped
    timestamp = Column(DateTime(timezone=True), nullable=False)

    employee_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    employee_name = Column(String(255), nullable=False)
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    project_name = Column(String(255), nullable=False)

    duration_minutes = Column(Integer, nullable=False)
    duration_formatted = Column(String(32), nullable=False)

    # Relationships
    employee = relationship("User", back_populates="completed_sessions")
    project = relationship("Project", back_populates="completed_sessions")

    __table_args__ = (
        Index("idx_completed_sessions_project_timestamp", "project_id", "timestamp"),
        Index("idx_completed_sessions_employee", "employee_id"),
        Index("idx_completed_sessions_timestamp", "timestamp"),
    )

    def __repr__(self):
        return f"<CompletedSession(id={self.id}, employee='{self.employee_id}', project='{self.project_id}', minutes={self.duration_minutes})>"
