"""Task model: free-text leaf of the hierarchy that budget lines attach to."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from budget_dashboard.database import Base


class Task(Base):
    """Task within an activity.

    Tasks have no code: they are identified by ``name`` inside their activity,
    so the importer falls back to a default name when a row carries none.

    Attributes:
        id: Primary key.
        activity_id: Foreign key to Activity.
        name: Short label (max 100 chars for engagement-created tasks).
        description: Optional long description.
    """

    __tablename__ = "tasks"
    __table_args__ = (UniqueConstraint("activity_id", "name", name="uq_tasks_activity_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Relationships
    activity = relationship("Activity", back_populates="tasks", lazy="select")
    budget_lines = relationship("BudgetLine", back_populates="task", lazy="select")
