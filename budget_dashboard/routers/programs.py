"""
Program router.

Mounts under ``/api/programs`` (prefix set in ``main.py``).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from budget_dashboard.database import get_db
from budget_dashboard.schemas.budget import ProgramCreate, ProgramResponse, ProgramUpdate
from budget_dashboard.schemas.common import MessageResponse
from budget_dashboard.services import program_service

router = APIRouter(tags=["Programs"])

ProgramId = Annotated[int, Path(ge=1, description="Program ID.")]


@router.post("", response_model=ProgramResponse, status_code=status.HTTP_201_CREATED)
def create_program(
    data: ProgramCreate,
    db: Annotated[Session, Depends(get_db)],
) -> ProgramResponse:
    return ProgramResponse.model_validate(program_service.create_program(db, data))


@router.put("/{program_id}", response_model=ProgramResponse)
def update_program(
    program_id: ProgramId,
    data: ProgramUpdate,
    db: Annotated[Session, Depends(get_db)],
) -> ProgramResponse:
    return ProgramResponse.model_validate(program_service.update_program(db, program_id, data))


@router.delete(
    "/{program_id}",
    response_model=MessageResponse,
    responses={409: {"description": "The program still has actions."}},
)
def delete_program(
    program_id: ProgramId,
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    program_service.delete_program(db, program_id)
    return MessageResponse(message="Program deleted.", id=program_id)
