"""FiscalYear model."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from budget_dashboard.database import Base


class FiscalYear(Base):
    """Budget year.

    Only one row is expected to carry ``is_active=True``; the single-line
    create paths attach new lines to it. This is not enforced by a constraint.
    """

    __tablename__ = "fiscal_years"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)

    # Relationships
    budget_lines = relationship("BudgetLine", back_populates="fiscal_year", lazy="select")
