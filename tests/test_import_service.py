from datetime import date

import pytest

from budget_dashboard.models import (
    Action,
    Activity,
    AdminUnit,
    BudgetLine,
    FiscalYear,
    Program,
    Task,
)
from budget_dashboard.repositories.budget_repository import (
    BudgetRepository,
    SqlAlchemyBudgetRepository,
)
from budget_dashboard.services.import_service import (
    NO_LINES_ERROR,
    BudgetImporter,
    import_budget_file,
)

from conftest import HEADER, build_xlsx_bytes


def _workbook():
    return build_xlsx_bytes(
        {
            "PROGRAMME 118": [
                HEADER,
                ["Action 1 : Pilotage", None, None, None, None, None, None, None, None, None],
                [None, None, None, "D01", "Direction", "612024", "Carburant", 1000, 800, 500],
                [None, None, None, None, None, "612025", "Papeterie", 200, 200, 0],
                [None, "[02] Études", None, None, None, None, None, None, None, None],
                [None, None, "Audit", None, None, "612026", "Conseil", 300, 300, 300],
            ]
        }
    )


class _MemoryRepository(BudgetRepository):
    """Dict-backed repository that counts find and insert calls."""

    def __init__(self):
        self.rows = {}
        self.calls = []
        self.lines = []
        self.fiscal_years = {}

    def _find(self, kind, key):
        self.calls.append(("find", kind))
        return self.rows.get((kind, key))

    def _insert(self, kind, key):
        self.calls.append(("insert", kind))
        self.rows[(kind, key)] = len(self.rows) + 1
        return self.rows[(kind, key)]

    def find_program(self, code):
        return self._find("program", code)

    def insert_program(self, code, name):
        return self._insert("program", code)

    def find_action(self, program_id, code):
        return self._find("action", (program_id, code))

    def insert_action(self, program_id, code, name):
        return self._insert("action", (program_id, code))

    def find_activity(self, action_id, code):
        return self._find("activity", (action_id, code))

    def insert_activity(self, action_id, code, name):
        return self._insert("activity", (action_id, code))

    def find_task(self, activity_id, name):
        return self._find("task", (activity_id, name))

    def insert_task(self, activity_id, name, description=None):
        return self._insert("task", (activity_id, name))

    def find_admin_unit(self, code):
        return self._find("admin_unit", code)

    def insert_admin_unit(self, code, name):
        return self._insert("admin_unit", code)

    def find_fiscal_year(self, year):
        return self.fiscal_years.get(year, (None,))[0]

    def find_active_fiscal_year(self):
        for fid, active in self.fiscal_years.values():
            if active:
                return fid
        return None

    def insert_fiscal_year(self, year, name, is_active):
        self.fiscal_years[year] = (100 + len(self.fiscal_years), is_active)
        return self.fiscal_years[year][0]

    def insert_budget_line(self, values):
        self.lines.append(values)
        return len(self.lines)


def _line(**overrides):
    line = {
        "program_code": "118",
        "program_name": "PROGRAMME 118",
        "action_code": "01",
        "action_name": "Action 01",
        "activity_code": "01",
        "activity_name": "Activité 01",
        "task_name": "",
        "admin_unit_code": "",
        "admin_unit_name": "",
        "paragraph_code": "612024",
        "paragraph_name": "",
        "ae": 10.0,
        "cp": 10.0,
        "engaged": 0.0,
    }
    line.update(overrides)
    return line


def test_importer_caches_each_hierarchy_key_once():
    repo = _MemoryRepository()
    importer = BudgetImporter(repo)

    count = importer.import_lines([_line(), _line(paragraph_code="612025"), _line()], fiscal_year_id=7)

    assert count == 3
    assert len(repo.lines) == 3
    assert repo.calls.count(("find", "program")) == 1
    assert repo.calls.count(("insert", "action")) == 1
    assert repo.calls.count(("insert", "task")) == 1
    assert all(line["fiscal_year_id"] == 7 for line in repo.lines)


def test_importer_uses_default_task_and_skips_empty_admin_unit():
    repo = _MemoryRepository()

    BudgetImporter(repo).import_lines([_line()], fiscal_year_id=None)

    assert ("task", (3, "Tâche par défaut")) in repo.rows
    assert repo.lines[0]["admin_unit_id"] is None
    assert ("find", "admin_unit") not in repo.calls


def test_same_code_under_different_parents_is_distinct():
    repo = _MemoryRepository()

    BudgetImporter(repo).import_lines(
        [_line(), _line(program_code="205", program_name="PROGRAMME 205")],
        fiscal_year_id=None,
    )

    assert repo.calls.count(("insert", "action")) == 2
    assert repo.calls.count(("insert", "activity")) == 2


def test_resolve_fiscal_year_only_activates_when_none_active():
    repo = _MemoryRepository()
    importer = BudgetImporter(repo)

    first = importer.resolve_fiscal_year(2024)
    second = importer.resolve_fiscal_year(2025)

    assert importer.resolve_fiscal_year(2024) == first
    assert repo.fiscal_years[2024] == (first, True)
    assert repo.fiscal_years[2025] == (second, False)


def test_import_budget_file_persists_hierarchy(db):
    repo = SqlAlchemyBudgetRepository(db)

    outcome = import_budget_file(repo, _workbook(), "Budget_2024_final.xlsx", today=date(2025, 1, 1))

    assert outcome.success
    assert outcome.count == 3
    assert outcome.fiscal_year == 2024
    assert db.query(Program).one().code == "118"
    assert {a.code for a in db.query(Activity).all()} == {"01", "02"}
    assert {t.name for t in db.query(Task).all()} == {"Tâche par défaut", "Audit"}
    unit = db.query(AdminUnit).one()
    assert (unit.code, unit.name) == ("D01", "Direction")
    fiscal_year = db.query(FiscalYear).one()
    assert (fiscal_year.year, fiscal_year.name, fiscal_year.is_active) == (2024, "Budget 2024", True)

    audit = db.query(BudgetLine).filter(BudgetLine.paragraph_code == "612026").one()
    assert float(audit.engaged) == pytest.approx(300)
    assert audit.admin_unit_id == unit.id
    assert audit.fiscal_year_id == fiscal_year.id


def test_importing_twice_doubles_lines_but_not_hierarchy(db):
    repo = SqlAlchemyBudgetRepository(db)

    import_budget_file(repo, _workbook(), "budget_2024.xlsx", today=date(2025, 1, 1))
    import_budget_file(repo, _workbook(), "budget_2024.xlsx", today=date(2025, 1, 1))

    assert db.query(BudgetLine).count() == 6
    assert db.query(Program).count() == 1
    assert db.query(Action).count() == 1
    assert db.query(Activity).count() == 2
    assert db.query(Task).count() == 2
    assert db.query(AdminUnit).count() == 1
    assert db.query(FiscalYear).count() == 1


def test_workbook_without_lines_is_a_failure(db):
    raw = build_xlsx_bytes({"Notes": [["nothing here"]]})

    outcome = import_budget_file(SqlAlchemyBudgetRepository(db), raw, "notes.xlsx")

    assert not outcome.success
    assert outcome.error == NO_LINES_ERROR
    assert outcome.count is None


def test_repository_failure_is_reported_as_outcome():
    class _BrokenRepository(_MemoryRepository):
        def insert_budget_line(self, values):
            raise RuntimeError("disk full")

    outcome = import_budget_file(_BrokenRepository(), _workbook(), "budget_2024.xlsx")

    assert not outcome.success
    assert outcome.error == "disk full"
