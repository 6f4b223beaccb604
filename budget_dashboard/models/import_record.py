"""ImportRecord model: audit log of every budget file uploaded."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from budget_dashboard.database import Base


class ImportRecord(Base):
    """Persistent audit record written after each import attempt.

    One row is written per upload regardless of outcome.

    Attributes:
        id: Primary key.
        filename: Original filename submitted by the client.
        fiscal_year: Year inferred from the filename.
        imported_at: Timestamp when the import was processed.
        status: ``"SUCCESS"`` or ``"FAILED"``.
        lines_inserted: Count of budget lines persisted.
        error: Failure message, if any.
        warnings_json: JSON-serialised list of warning messages.
    """

    __tablename__ = "import_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(500), nullable=False)
    fiscal_year = Column(Integer, nullable=True)
    imported_at = Column(DateTime, default=func.now(), nullable=False)
    status = Column(String(20), nullable=False)  # SUCCESS | FAILED
    lines_inserted = Column(Integer, default=0, nullable=False)
    error = Column(Text, nullable=True)
    warnings_json = Column(Text, nullable=True)
