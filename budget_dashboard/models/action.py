"""Action model: second level of the hierarchy, scoped to a program."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from budget_dashboard.database import Base


class Action(Base):
    """Action within a program.

    Attributes:
        id: Primary key.
        program_id: Foreign key to Program.
        code: Two-digit action code, unique per program.
        name: Label taken from the ``Action N : ...`` header row.
    """

    __tablename__ = "actions"
    __table_args__ = (UniqueConstraint("program_id", "code", name="uq_actions_program_code"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    program_id = Column(Integer, ForeignKey("programs.id"), nullable=False)
    code = Column(String(20), nullable=False)
    name = Column(String(500), nullable=False)

    # Relationships
    program = relationship("Program", back_populates="actions", lazy="select")
    activities = relationship("Activity", back_populates="action", lazy="select")
