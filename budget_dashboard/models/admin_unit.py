"""AdminUnit model: administrative unit (department) responsible for a line."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from budget_dashboard.database import Base


class AdminUnit(Base):
    """Cross-cutting administrative unit, optionally attached to a budget line.

    Attributes:
        id: Primary key.
        code: Unit code as printed in the spreadsheet. Globally unique.
        name: Unit label; defaults to the code when the sheet has none.
    """

    __tablename__ = "admin_units"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(255), unique=True, nullable=False)
    name = Column(String(255), nullable=False)

    # Relationships
    budget_lines = relationship("BudgetLine", back_populates="admin_unit", lazy="select")
