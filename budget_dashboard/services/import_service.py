"""
Budget import service layer.

Handles budget workbook uploads end-to-end:

1. Infer the fiscal year from the filename.
2. Parse the workbook with ``BudgetWorkbookParser``.
3. Resolve the hierarchy (program, action, activity, task, admin unit) for
   every line through a ``BudgetRepository``, reusing rows that exist.
4. Insert one budget line per parsed line.
5. Write an ``ImportRecord`` audit row.
6. Return an ``ImportResult`` summary to the calling router.

Upsert strategy
---------------
- Hierarchy rows are looked up by natural key scoped to their parent:
  Program(code), Action(program_id, code), Activity(action_id, code),
  Task(activity_id, name), AdminUnit(code).
- Each key is cached for the duration of one run, so a key costs at most one
  find and one insert no matter how many lines share it.
- Budget lines are always inserted; importing the same file twice doubles the
  lines but reuses every hierarchy row.
- There is no transaction around the whole run: the repository commits each
  insert, so a failure midway keeps the rows created before it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from fastapi import UploadFile
from sqlalchemy.orm import Session

from budget_dashboard.config import get_settings
from budget_dashboard.models.import_record import ImportRecord
from budget_dashboard.parsers.budget_parser import BudgetWorkbookParser
from budget_dashboard.repositories.budget_repository import (
    BudgetRepository,
    SqlAlchemyBudgetRepository,
)
from budget_dashboard.schemas.imports import ImportHistoryItem, ImportResult
from budget_dashboard.utils.constants import (
    DEFAULT_TASK_NAME,
    IMPORT_STATUS_FAILED,
    IMPORT_STATUS_SUCCESS,
)
from budget_dashboard.utils.fiscal_year import infer_fiscal_year

logger = logging.getLogger(__name__)

NO_LINES_ERROR = "No valid budget lines found in file."


# ---------------------------------------------------------------------------
# Upsert coordinator
# ---------------------------------------------------------------------------


class BudgetImporter:
    """Resolve hierarchy rows and insert budget lines for one import run.

    Caches are per instance; create a new importer for every run.
    """

    def __init__(self, repository: BudgetRepository, default_task_name: str = DEFAULT_TASK_NAME):
        self.repo = repository
        self.default_task_name = default_task_name
        self._programs: dict[str, int] = {}
        self._actions: dict[tuple[int, str], int] = {}
        self._activities: dict[tuple[int, str], int] = {}
        self._tasks: dict[tuple[int, str], int] = {}
        self._admin_units: dict[str, int] = {}

    def resolve_fiscal_year(self, year: int) -> int:
        """Return the fiscal year id for ``year``, creating it when missing.

        A new fiscal year only becomes active when no other year is active.
        """
        fiscal_year_id = self.repo.find_fiscal_year(year)
        if fiscal_year_id is not None:
            return fiscal_year_id
        is_active = self.repo.find_active_fiscal_year() is None
        logger.info("Creating fiscal year %d (active=%s)", year, is_active)
        return self.repo.insert_fiscal_year(year, f"Budget {year}", is_active)

    def import_lines(self, lines: list[dict[str, Any]], fiscal_year_id: int | None) -> int:
        """Insert every line in order; returns the number of lines inserted."""
        inserted = 0
        for line in lines:
            program_id = self._program_id(line["program_code"], line["program_name"])
            action_id = self._action_id(program_id, line["action_code"], line["action_name"])
            activity_id = self._activity_id(action_id, line["activity_code"], line["activity_name"])
            task_id = self._task_id(activity_id, line.get("task_name") or self.default_task_name)
            admin_unit_id = self._admin_unit_id(
                line.get("admin_unit_code") or "", line.get("admin_unit_name") or ""
            )
            self.repo.insert_budget_line(
                {
                    "task_id": task_id,
                    "admin_unit_id": admin_unit_id,
                    "fiscal_year_id": fiscal_year_id,
                    "paragraph_code": line["paragraph_code"],
                    "paragraph_name": line.get("paragraph_name") or "",
                    "ae": line["ae"],
                    "cp": line["cp"],
                    "engaged": line["engaged"],
                }
            )
            inserted += 1
        logger.info(
            "Imported %d lines (%d programs, %d actions, %d activities, %d tasks, %d admin units)",
            inserted,
            len(self._programs),
            len(self._actions),
            len(self._activities),
            len(self._tasks),
            len(self._admin_units),
        )
        return inserted

    # -- cache-backed find-or-insert --------------------------------------

    def _program_id(self, code: str, name: str) -> int:
        if code not in self._programs:
            found = self.repo.find_program(code)
            self._programs[code] = found if found is not None else self.repo.insert_program(code, name)
        return self._programs[code]

    def _action_id(self, program_id: int, code: str, name: str) -> int:
        key = (program_id, code)
        if key not in self._actions:
            found = self.repo.find_action(program_id, code)
            self._actions[key] = (
                found if found is not None else self.repo.insert_action(program_id, code, name)
            )
        return self._actions[key]

    def _activity_id(self, action_id: int, code: str, name: str) -> int:
        key = (action_id, code)
        if key not in self._activities:
            found = self.repo.find_activity(action_id, code)
            self._activities[key] = (
                found if found is not None else self.repo.insert_activity(action_id, code, name)
            )
        return self._activities[key]

    def _task_id(self, activity_id: int, name: str) -> int:
        key = (activity_id, name)
        if key not in self._tasks:
            found = self.repo.find_task(activity_id, name)
            self._tasks[key] = found if found is not None else self.repo.insert_task(activity_id, name)
        return self._tasks[key]

    def _admin_unit_id(self, code: str, name: str) -> int | None:
        if not code:
            return None
        if code not in self._admin_units:
            found = self.repo.find_admin_unit(code)
            self._admin_units[code] = (
                found if found is not None else self.repo.insert_admin_unit(code, name or code)
            )
        return self._admin_units[code]


# ---------------------------------------------------------------------------
# Import action
# ---------------------------------------------------------------------------


@dataclass
class ImportOutcome:
    """Result of ``import_budget_file``; ``count`` on success, ``error`` otherwise."""

    success: bool
    count: int | None = None
    error: str | None = None
    fiscal_year: int | None = None
    warnings: list[str] = field(default_factory=list)


def import_budget_file(
    repository: BudgetRepository,
    raw: bytes,
    filename: str,
    today: date | None = None,
    default_task_name: str | None = None,
) -> ImportOutcome:
    """Parse ``raw`` and persist its budget lines through ``repository``.

    Never raises: any failure is returned as ``ImportOutcome(success=False)``.
    """
    year = infer_fiscal_year(filename, today=today)
    result = BudgetWorkbookParser(raw).parse()
    warnings = [*result.errors, *result.warnings]

    if not result.records:
        logger.warning("import '%s': %s %s", filename, NO_LINES_ERROR, result.summary())
        return ImportOutcome(success=False, error=NO_LINES_ERROR, fiscal_year=year, warnings=warnings)

    importer = BudgetImporter(repository, default_task_name or get_settings().DEFAULT_TASK_NAME)
    try:
        fiscal_year_id = importer.resolve_fiscal_year(year)
        count = importer.import_lines(result.records, fiscal_year_id)
    except Exception as exc:
        logger.exception("import '%s' failed while writing budget lines", filename)
        return ImportOutcome(success=False, error=str(exc), fiscal_year=year, warnings=warnings)

    return ImportOutcome(success=True, count=count, fiscal_year=year, warnings=warnings)


# ---------------------------------------------------------------------------
# Upload entry point
# ---------------------------------------------------------------------------


def _write_audit_log(db: Session, filename: str, outcome: ImportOutcome) -> None:
    """Persist an ``ImportRecord`` row for this upload."""
    db.add(
        ImportRecord(
            filename=filename,
            fiscal_year=outcome.fiscal_year,
            imported_at=datetime.now(timezone.utc),
            status=IMPORT_STATUS_SUCCESS if outcome.success else IMPORT_STATUS_FAILED,
            lines_inserted=outcome.count or 0,
            error=outcome.error,
            warnings_json=json.dumps(outcome.warnings, ensure_ascii=False) if outcome.warnings else None,
        )
    )


async def process_upload(db: Session, file: UploadFile) -> ImportResult:
    """Process an uploaded budget workbook end-to-end.

    Raises:
        ValueError: If the upload is empty.
        RuntimeError: If the audit record cannot be written.
    """
    raw: bytes = await file.read()
    filename: str = file.filename or "upload.xlsx"
    if not raw:
        raise ValueError("The uploaded file is empty.")

    logger.info("process_upload: file='%s' size=%d", filename, len(raw))
    outcome = import_budget_file(SqlAlchemyBudgetRepository(db), raw, filename)
    if not outcome.success:
        db.rollback()

    try:
        _write_audit_log(db, filename, outcome)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("Failed to write audit log for import '%s'", filename)
        raise RuntimeError(f"Could not save the import record: {exc}") from exc

    return ImportResult(
        success=outcome.success,
        count=outcome.count,
        error=outcome.error,
        fiscal_year=outcome.fiscal_year,
        warnings=outcome.warnings,
    )


# ---------------------------------------------------------------------------
# History query
# ---------------------------------------------------------------------------


def get_history(db: Session, limit: int = 100) -> list[ImportHistoryItem]:
    """Return the import history list, most-recent first."""
    records = (
        db.query(ImportRecord)
        .order_by(ImportRecord.imported_at.desc(), ImportRecord.id.desc())
        .limit(limit)
        .all()
    )
    logger.debug("get_history: %d records returned", len(records))
    return [ImportHistoryItem.model_validate(rec) for rec in records]
