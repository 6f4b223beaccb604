"""Persistence contract used by the budget importer.

``BudgetRepository`` keeps the importer independent of the storage layer;
``SqlAlchemyBudgetRepository`` is the implementation used by the service.
Every ``find_*`` returns the row id or ``None``; every ``insert_*`` returns
the id of the new row.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from budget_dashboard.models import (
    Action,
    Activity,
    AdminUnit,
    BudgetLine,
    FiscalYear,
    Program,
    Task,
)


class BudgetRepository(ABC):
    """Find-or-insert operations for every level of the budget hierarchy."""

    @abstractmethod
    def find_program(self, code: str) -> int | None: ...

    @abstractmethod
    def insert_program(self, code: str, name: str) -> int: ...

    @abstractmethod
    def find_action(self, program_id: int, code: str) -> int | None: ...

    @abstractmethod
    def insert_action(self, program_id: int, code: str, name: str) -> int: ...

    @abstractmethod
    def find_activity(self, action_id: int, code: str) -> int | None: ...

    @abstractmethod
    def insert_activity(self, action_id: int, code: str, name: str) -> int: ...

    @abstractmethod
    def find_task(self, activity_id: int, name: str) -> int | None: ...

    @abstractmethod
    def insert_task(self, activity_id: int, name: str, description: str | None = None) -> int: ...

    @abstractmethod
    def find_admin_unit(self, code: str) -> int | None: ...

    @abstractmethod
    def insert_admin_unit(self, code: str, name: str) -> int: ...

    @abstractmethod
    def find_fiscal_year(self, year: int) -> int | None: ...

    @abstractmethod
    def find_active_fiscal_year(self) -> int | None: ...

    @abstractmethod
    def insert_fiscal_year(self, year: int, name: str, is_active: bool) -> int: ...

    @abstractmethod
    def insert_budget_line(self, values: dict[str, Any]) -> int: ...


def _money(value: Any) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


class SqlAlchemyBudgetRepository(BudgetRepository):
    """Thin repository over a SQLAlchemy session; each insert commits."""

    def __init__(self, db: Session):
        self._db = db

    def _add(self, row: Any) -> int:
        self._db.add(row)
        self._db.commit()
        return row.id

    def _first_id(self, stmt: Any) -> int | None:
        return self._db.execute(stmt.limit(1)).scalar_one_or_none()

    # -- Program / Action / Activity / Task ------------------------------

    def find_program(self, code: str) -> int | None:
        return self._first_id(select(Program.id).where(Program.code == code))

    def insert_program(self, code: str, name: str) -> int:
        return self._add(Program(code=code, name=name))

    def find_action(self, program_id: int, code: str) -> int | None:
        return self._first_id(
            select(Action.id).where(Action.program_id == program_id, Action.code == code)
        )

    def insert_action(self, program_id: int, code: str, name: str) -> int:
        return self._add(Action(program_id=program_id, code=code, name=name))

    def find_activity(self, action_id: int, code: str) -> int | None:
        return self._first_id(
            select(Activity.id).where(Activity.action_id == action_id, Activity.code == code)
        )

    def insert_activity(self, action_id: int, code: str, name: str) -> int:
        return self._add(Activity(action_id=action_id, code=code, name=name))

    def find_task(self, activity_id: int, name: str) -> int | None:
        return self._first_id(
            select(Task.id).where(Task.activity_id == activity_id, Task.name == name)
        )

    def insert_task(self, activity_id: int, name: str, description: str | None = None) -> int:
        return self._add(Task(activity_id=activity_id, name=name, description=description))

    # -- Cross-cutting references ----------------------------------------

    def find_admin_unit(self, code: str) -> int | None:
        return self._first_id(select(AdminUnit.id).where(AdminUnit.code == code))

    def insert_admin_unit(self, code: str, name: str) -> int:
        return self._add(AdminUnit(code=code, name=name))

    def find_fiscal_year(self, year: int) -> int | None:
        return self._first_id(select(FiscalYear.id).where(FiscalYear.year == year))

    def find_active_fiscal_year(self) -> int | None:
        return self._first_id(
            select(FiscalYear.id).where(FiscalYear.is_active.is_(True)).order_by(FiscalYear.year.desc())
        )

    def insert_fiscal_year(self, year: int, name: str, is_active: bool) -> int:
        return self._add(FiscalYear(year=year, name=name, is_active=is_active))

    # -- Budget lines ----------------------------------------------------

    def insert_budget_line(self, values: dict[str, Any]) -> int:
        return self._add(
            BudgetLine(
                task_id=values["task_id"],
                admin_unit_id=values.get("admin_unit_id"),
                fiscal_year_id=values.get("fiscal_year_id"),
                paragraph_code=values["paragraph_code"],
                paragraph_name=values.get("paragraph_name") or "",
                ae=_money(values.get("ae")),
                cp=_money(values.get("cp")),
                engaged=_money(values.get("engaged")),
            )
        )
