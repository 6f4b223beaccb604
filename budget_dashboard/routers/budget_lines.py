"""
Budget line router.

Mounts under ``/api/budget-lines`` (prefix set in ``main.py``).

Endpoints
---------
POST   /                   Create a line in the active fiscal year.
PUT    /{id}               Replace AE / CP / engaged (engaged <= AE).
PATCH  /{id}/engagement    Set the engaged amount (checked against AE).
DELETE /{id}               Delete a line.
POST   /engagements        Record a new engagement under a task.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from budget_dashboard.database import get_db
from budget_dashboard.schemas.budget import (
    BudgetLineCreate,
    BudgetLineResponse,
    BudgetLineUpdate,
    EngagementCreate,
    EngagementUpdate,
)
from budget_dashboard.schemas.common import MessageResponse
from budget_dashboard.services import budget_line_service

router = APIRouter(tags=["Budget lines"])

LineId = Annotated[int, Path(ge=1, description="Budget line ID.")]


@router.post("", response_model=BudgetLineResponse, status_code=status.HTTP_201_CREATED)
def create_budget_line(
    data: BudgetLineCreate,
    db: Annotated[Session, Depends(get_db)],
) -> BudgetLineResponse:
    line = budget_line_service.create_budget_line(db, data)
    return BudgetLineResponse.model_validate(line)


@router.post(
    "/engagements",
    response_model=BudgetLineResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_engagement(
    data: EngagementCreate,
    db: Annotated[Session, Depends(get_db)],
) -> BudgetLineResponse:
    line = budget_line_service.create_engagement(db, data)
    return BudgetLineResponse.model_validate(line)


@router.put("/{line_id}", response_model=BudgetLineResponse)
def update_budget_line(
    line_id: LineId,
    data: BudgetLineUpdate,
    db: Annotated[Session, Depends(get_db)],
) -> BudgetLineResponse:
    line = budget_line_service.update_budget_line(db, line_id, data)
    return BudgetLineResponse.model_validate(line)


@router.patch("/{line_id}/engagement", response_model=BudgetLineResponse)
def update_engagement(
    line_id: LineId,
    data: EngagementUpdate,
    db: Annotated[Session, Depends(get_db)],
) -> BudgetLineResponse:
    line = budget_line_service.update_engagement(db, line_id, data)
    return BudgetLineResponse.model_validate(line)


@router.delete("/{line_id}", response_model=MessageResponse)
def delete_budget_line(
    line_id: LineId,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    budget_line_service.delete_budget_line(db, line_id)
    return MessageResponse(message="Budget line deleted.", id=line_id)
