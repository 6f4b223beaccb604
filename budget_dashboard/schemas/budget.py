"""
Pydantic v2 schemas for budget lines, engagements and programs.

Amounts are plain floats on the wire; the ORM stores them as ``Numeric``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

_PARAGRAPH_PATTERN = r"^\d{6}$"


# ---------------------------------------------------------------------------
# Budget lines
# ---------------------------------------------------------------------------


class BudgetLineCreate(BaseModel):
    """Payload for POST /api/budget-lines.

    The line is attached to ``task_name`` under the activity (found or
    created); the default task is used when the name is omitted.
    """

    activity_id: int = Field(..., ge=1)
    task_name: str | None = Field(default=None, max_length=255)
    admin_unit_id: int | None = Field(default=None, ge=1)
    paragraph_code: str = Field(..., pattern=_PARAGRAPH_PATTERN, description="Six-digit code.")
    paragraph_name: str = ""
    ae: float = Field(..., ge=0)
    cp: float = Field(..., ge=0)
    engaged: float = Field(default=0, ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "activity_id": 3,
                "task_name": "Équipement des salles",
                "admin_unit_id": 1,
                "paragraph_code": "612024",
                "paragraph_name": "Fournitures de bureau",
                "ae": 1000000.0,
                "cp": 800000.0,
                "engaged": 0.0,
            }
        }
    )


class BudgetLineUpdate(BaseModel):
    """Payload for PUT /api/budget-lines/{id}."""

    ae: float = Field(..., ge=0)
    cp: float = Field(..., ge=0)
    engaged: float = Field(..., ge=0)


class BudgetLineResponse(BaseModel):
    id: int
    task_id: int
    admin_unit_id: int | None = None
    fiscal_year_id: int | None = None
    paragraph_code: str
    paragraph_name: str
    ae: float
    cp: float
    engaged: float
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Engagements
# ---------------------------------------------------------------------------


class EngagementCreate(BaseModel):
    """Payload for POST /api/budget-lines/engagements.

    Creates (or reuses) a task named after the description under the given
    activity, then a budget line with AE = CP = amount and nothing engaged.
    The description doubles as the line's paragraph label.
    """

    activity_id: int = Field(..., ge=1)
    description: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    paragraph_code: str = Field(..., pattern=_PARAGRAPH_PATTERN)
    admin_unit_id: int | None = Field(default=None, ge=1)


class EngagementUpdate(BaseModel):
    """Payload for PATCH /api/budget-lines/{id}/engagement."""

    engaged: float = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Programs
# ---------------------------------------------------------------------------


class ProgramCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)


class ProgramUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    code: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=255)


class ProgramResponse(BaseModel):
    id: int
    code: str
    name: str

    model_config = ConfigDict(from_attributes=True)
