"""Activity model: third level of the hierarchy, scoped to an action."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from budget_dashboard.database import Base


class Activity(Base):
    """Activity within an action; ``code`` is unique per action."""

    __tablename__ = "activities"
    __table_args__ = (UniqueConstraint("action_id", "code", name="uq_activities_action_code"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    action_id = Column(Integer, ForeignKey("actions.id"), nullable=False)
    code = Column(String(20), nullable=False)
    name = Column(String(500), nullable=False)

    # Relationships
    action = relationship("Action", back_populates="activities", lazy="select")
    tasks = relationship("Task", back_populates="activity", lazy="select")
