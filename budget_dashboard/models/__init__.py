"""SQLAlchemy models package.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` runs. The import order follows
the foreign-key dependency graph so that parent tables are registered before
their children.

Usage from other modules:
    from budget_dashboard.models import BudgetLine, Program
"""

# Budget hierarchy
from budget_dashboard.models.program import Program  # noqa: F401
from budget_dashboard.models.action import Action  # noqa: F401
from budget_dashboard.models.activity import Activity  # noqa: F401
from budget_dashboard.models.task import Task  # noqa: F401

# Cross-cutting references
from budget_dashboard.models.admin_unit import AdminUnit  # noqa: F401
from budget_dashboard.models.fiscal_year import FiscalYear  # noqa: F401

# Monetary leaf
from budget_dashboard.models.budget_line import BudgetLine  # noqa: F401

# Import audit log
from budget_dashboard.models.import_record import ImportRecord  # noqa: F401

__all__ = [
    "Program",
    "Action",
    "Activity",
    "Task",
    "AdminUnit",
    "FiscalYear",
    "BudgetLine",
    "ImportRecord",
]
