"""BudgetLine model: monetary leaf row (AE / CP / engaged per paragraph)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from budget_dashboard.database import Base


class BudgetLine(Base):
    """One paragraph-level budget line.

    Attributes:
        id: Primary key.
        task_id: Foreign key to Task.
        admin_unit_id: Optional foreign key to AdminUnit.
        fiscal_year_id: Optional foreign key to FiscalYear.
        paragraph_code: Six-digit paragraph code, e.g. "612024".
        paragraph_name: Paragraph label.
        ae: Autorisation d'engagement (authorized envelope).
        cp: Crédit de paiement (payment credits).
        engaged: Amount already committed against the AE.
        created_at: Row creation timestamp.
    """

    __tablename__ = "budget_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False)
    admin_unit_id = Column(Integer, ForeignKey("admin_units.id"), nullable=True)
    fiscal_year_id = Column(Integer, ForeignKey("fiscal_years.id"), nullable=True)
    paragraph_code = Column(String(20), nullable=False)
    paragraph_name = Column(String(500), nullable=False, default="")
    ae = Column(Numeric(20, 2), default=0, nullable=False)
    cp = Column(Numeric(20, 2), default=0, nullable=False)
    engaged = Column(Numeric(20, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    task = relationship("Task", back_populates="budget_lines", lazy="select")
    admin_unit = relationship("AdminUnit", back_populates="budget_lines", lazy="select")
    fiscal_year = relationship("FiscalYear", back_populates="budget_lines", lazy="select")
