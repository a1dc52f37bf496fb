"""User model for identity and access."""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Table
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from worktime.database import Base


user_cost_centers = Table(
    "user_cost_centers",
    Base.metadata,
    Column("user_id", String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("center_id", Integer, ForeignKey("cost_centers.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Employee, manager or administrator who can track time."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    username = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="employee")  # 'employee', 'manager', 'admin'
    blocked = Column(Boolean, default=False, nullable=False)
    can_select_project_manually = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    cost_centers = relationship("CostCenter", secondary=user_cost_centers, back_populates="users")
    active_session = relationship(
        "ActiveSession", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    completed_sessions = relationship(
        "CompletedSession", back_populates="employee", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def cost_center_ids(self):
        return sorted(center.id for center in self.cost_centers)

    def __repr__(self):
        return f"<User(id='{self.id}', username='{self.username}', role='{self.role}')>"
