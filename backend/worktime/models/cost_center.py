"""Cost center model grouping projects and users."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from worktime.database import Base
from worktime.models.user import user_cost_centers


class CostCenter(Base):
    """Organizational unit that scopes which projects a user may work on."""

    __tablename__ = "cost_centers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)

    # Relationships
    projects = relationship("Project", back_populates="cost_center", passive_deletes=True)
    users = relationship("User", secondary=user_cost_centers, back_populates="cost_centers")

    def __repr__(self):
        return f"<CostCenter(id={self.id}, name='{self.name}')>"
