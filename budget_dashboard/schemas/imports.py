"""
Pydantic v2 schemas for the budget import module.

Covers:
- Result returned after processing an uploaded budget workbook.
- Historical record for GET /api/import/history.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Upload result
# ---------------------------------------------------------------------------


class ImportResult(BaseModel):
    """Outcome of one budget workbook import.

    ``count`` is set on success, ``error`` on failure; never both.
    """

    success: bool
    count: int | None = Field(default=None, ge=0, description="Budget lines inserted.")
    error: str | None = None
    fiscal_year: int | None = Field(default=None, description="Year inferred from the filename.")
    warnings: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "count": 248,
                "error": None,
                "fiscal_year": 2024,
                "warnings": [
                    "Paragraph 612024 (PROGRAMME 118 row 42): engaged 1,600.00 exceeds 1.5 x AE 1,000.00"
                ],
            }
        }
    )


# ---------------------------------------------------------------------------
# Import history record
# ---------------------------------------------------------------------------


class ImportHistoryItem(BaseModel):
    """Single row in the import history list."""

    id: int
    filename: str
    fiscal_year: int | None = None
    imported_at: datetime
    status: str
    lines_inserted: int = Field(..., ge=0)
    error: str | None = None

    model_config = ConfigDict(from_attributes=True)
