"""
Budget line service layer.

Single-line write operations used by the dashboard editors: create, update,
engagement tracking and delete. Functions receive a SQLAlchemy ``Session``
and return ORM objects ready for serialisation by FastAPI.

Design notes
------------
- ``engaged <= ae`` is checked here, on every single-line update. The bulk
  importer does not check it and stores source figures as they are.
- New lines go to the active fiscal year; one is created for the current
  calendar year when none is active.
"""

from __future__ import annotations

import datetime
import logging
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from budget_dashboard.config import get_settings
from budget_dashboard.models.activity import Activity
from budget_dashboard.models.admin_unit import AdminUnit
from budget_dashboard.models.budget_line import BudgetLine
from budget_dashboard.models.fiscal_year import FiscalYear
from budget_dashboard.models.task import Task
from budget_dashboard.schemas.budget import (
    BudgetLineCreate,
    BudgetLineUpdate,
    EngagementCreate,
    EngagementUpdate,
)
from budget_dashboard.utils.constants import TASK_NAME_MAX_LENGTH

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def _get_line(db: Session, line_id: int) -> BudgetLine:
    line: BudgetLine | None = db.query(BudgetLine).filter(BudgetLine.id == line_id).first()
    if line is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Budget line with ID {line_id} not found.",
        )
    return line


def _check_references(db: Session, activity_id: int, admin_unit_id: int | None) -> None:
    if not db.query(Activity).filter(Activity.id == activity_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Activity with ID {activity_id} not found.",
        )
    if admin_unit_id is not None and not db.query(AdminUnit).filter(AdminUnit.id == admin_unit_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Admin unit with ID {admin_unit_id} not found.",
        )


def _check_engaged(engaged: float, ae: float) -> None:
    if engaged > ae:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Engagement ({engaged:.2f}) cannot exceed authorized amount ({ae:.2f})",
        )


def _get_or_create_task(
    db: Session, activity_id: int, name: str, description: str | None = None
) -> Task:
    task = (
        db.query(Task)
        .filter(Task.activity_id == activity_id, Task.name == name)
        .first()
    )
    if task is None:
        task = Task(activity_id=activity_id, name=name, description=description)
        db.add(task)
        db.flush()
        logger.info("Created task '%s' under activity %d", name, activity_id)
    return task


def get_or_create_active_fiscal_year(db: Session) -> FiscalYear:
    """Return the active fiscal year, activating or creating the current one."""
    active = (
        db.query(FiscalYear)
        .filter(FiscalYear.is_active.is_(True))
        .order_by(FiscalYear.year.desc())
        .first()
    )
    if active is not None:
        return active

    year = datetime.date.today().year
    fiscal_year = db.query(FiscalYear).filter(FiscalYear.year == year).first()
    if fiscal_year is None:
        fiscal_year = FiscalYear(year=year, name=f"Budget {year}", is_active=True)
        db.add(fiscal_year)
    else:
        fiscal_year.is_active = True
    db.flush()
    logger.info("Active fiscal year set to %d", year)
    return fiscal_year


# ---------------------------------------------------------------------------
# Budget lines
# ---------------------------------------------------------------------------


def create_budget_line(db: Session, data: BudgetLineCreate) -> BudgetLine:
    """Create a budget line in the active fiscal year.

    Raises:
        HTTPException 404: If the activity or admin unit does not exist.
    """
    _check_references(db, data.activity_id, data.admin_unit_id)
    fiscal_year = get_or_create_active_fiscal_year(db)
    task = _get_or_create_task(
        db, data.activity_id, data.task_name or get_settings().DEFAULT_TASK_NAME
    )

    line = BudgetLine(
        task_id=task.id,
        admin_unit_id=data.admin_unit_id,
        fiscal_year_id=fiscal_year.id,
        paragraph_code=data.paragraph_code,
        paragraph_name=data.paragraph_name,
        ae=_money(data.ae),
        cp=_money(data.cp),
        engaged=_money(data.engaged),
    )
    db.add(line)
    db.commit()
    db.refresh(line)

    logger.info("create_budget_line: id=%d paragraph=%s", line.id, line.paragraph_code)
    return line


def update_budget_line(db: Session, line_id: int, data: BudgetLineUpdate) -> BudgetLine:
    """Replace the AE / CP / engaged figures of a line.

    Raises:
        HTTPException 404: If the line does not exist.
        HTTPException 422: If ``engaged`` exceeds ``ae``.
    """
    line = _get_line(db, line_id)
    _check_engaged(data.engaged, data.ae)

    line.ae = _money(data.ae)
    line.cp = _money(data.cp)
    line.engaged = _money(data.engaged)
    db.commit()
    db.refresh(line)

    logger.info("update_budget_line: id=%d", line_id)
    return line


def update_engagement(db: Session, line_id: int, data: EngagementUpdate) -> BudgetLine:
    """Set the engaged amount, checked against the stored AE.

    Raises:
        HTTPException 404: If the line does not exist.
        HTTPException 422: If the new engaged amount exceeds the stored AE.
    """
    line = _get_line(db, line_id)
    _check_engaged(data.engaged, float(line.ae))

    line.engaged = _money(data.engaged)
    db.commit()
    db.refresh(line)

    logger.info("update_engagement: id=%d engaged=%.2f", line_id, data.engaged)
    return line


def create_engagement(db: Session, data: EngagementCreate) -> BudgetLine:
    """Record a new engagement as a budget line under a task named after it.

    The task name is the first ``TASK_NAME_MAX_LENGTH`` characters of the
    description; an existing task with that name is reused. The line gets
    AE = CP = amount and nothing engaged yet.
    """
    _check_references(db, data.activity_id, data.admin_unit_id)
    fiscal_year = get_or_create_active_fiscal_year(db)
    task = _get_or_create_task(
        db,
        data.activity_id,
        data.description[:TASK_NAME_MAX_LENGTH],
        description=data.description,
    )

    line = BudgetLine(
        task_id=task.id,
        admin_unit_id=data.admin_unit_id,
        fiscal_year_id=fiscal_year.id,
        paragraph_code=data.paragraph_code,
        paragraph_name=data.description,
        ae=_money(data.amount),
        cp=_money(data.amount),
        engaged=Decimal("0.00"),
    )
    db.add(line)
    db.commit()
    db.refresh(line)

    logger.info("create_engagement: line id=%d task id=%d", line.id, task.id)
    return line


def delete_budget_line(db: Session, line_id: int) -> None:
    """Delete a budget line.

    Raises:
        HTTPException 404: If the line does not exist.
    """
    line = _get_line(db, line_id)
    db.delete(line)
    db.commit()
    logger.info("delete_budget_line: id=%d", line_id)
