"""Program model: root of the budget hierarchy."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from budget_dashboard.database import Base


class Program(Base):
    """Budget program, one per ``PROGRAMME NNN`` worksheet.

    Attributes:
        id: Primary key.
        code: Three-digit program code, e.g. "118". Globally unique.
        name: Display name (the worksheet name on import).
    """

    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(255), nullable=False)

    # Relationships
    actions = relationship("Action", back_populates="program", lazy="select")
