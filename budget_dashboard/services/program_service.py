"""Program management: create, rename, delete."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from budget_dashboard.models.action import Action
from budget_dashboard.models.program import Program
from budget_dashboard.schemas.budget import ProgramCreate, ProgramUpdate

logger = logging.getLogger(__name__)


def _get_program(db: Session, program_id: int) -> Program:
    program: Program | None = db.query(Program).filter(Program.id == program_id).first()
    if program is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Program with ID {program_id} not found.",
        )
    return program


def _check_code_free(db: Session, code: str, program_id: int | None = None) -> None:
    query = db.query(Program).filter(Program.code == code)
    if program_id is not None:
        query = query.filter(Program.id != program_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A program with code '{code}' already exists.",
        )


def create_program(db: Session, data: ProgramCreate) -> Program:
    """Create a program.

    Raises:
        HTTPException 409: If the code is already used.
    """
    _check_code_free(db, data.code)
    program = Program(code=data.code, name=data.name)
    db.add(program)
    db.commit()
    db.refresh(program)
    logger.info("create_program: %s (id=%d)", program.code, program.id)
    return program


def update_program(db: Session, program_id: int, data: ProgramUpdate) -> Program:
    """Apply a partial update; only fields present in the payload are written."""
    program = _get_program(db, program_id)
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    if "code" in update_data:
        _check_code_free(db, update_data["code"], program_id)

    for field, value in update_data.items():
        setattr(program, field, value)
    db.commit()
    db.refresh(program)

    logger.info("update_program: id=%d fields=%s", program_id, list(update_data.keys()))
    return program


def delete_program(db: Session, program_id: int) -> None:
    """Delete a program that has no actions.

    Raises:
        HTTPException 404: If the program does not exist.
        HTTPException 409: If actions still reference the program.
    """
    program = _get_program(db, program_id)
    if db.query(Action).filter(Action.program_id == program_id).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Cannot delete program with associated actions and budget data",
        )
    db.delete(program)
    db.commit()
    logger.info("delete_program: id=%d", program_id)
