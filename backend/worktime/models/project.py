"""Project model for the project registry."""

from sqlalchemy import Column, Integer, String, Numeric, Date, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from worktime.database import Base


class Project(Base):
    """Billable project that work sessions are tracked against."""

    __tablename__ = "projects"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    budget = Column(Numeric(12, 2), nullable=False, default=0)
    deadline = Column(Date, nullable=True)
    closed = Column(Boolean, default=False, nullable=False, index=True)
    estimated_hours = Column(Numeric(10, 2), nullable=True)
    cost_center_id = Column(Integer, ForeignKey("cost_centers.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    cost_center = relationship("CostCenter", back_populates="projects")
    active_sessions = relationship(
        "ActiveSession", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    completed_sessions = relationship(
        "CompletedSession", back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def cost_center_name(self):
        return self.cost_center.name if self.cost_center else None

    def __repr__(self):
        return f"<Project(id='{self.id}', name='{self.name}', closed={self.closed})>"
