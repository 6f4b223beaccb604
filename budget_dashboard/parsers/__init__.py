"""Budget workbook parsers package.

Public API
----------
BaseParser            : Abstract base; inherit to create a new workbook parser.
ParseResult           : Dataclass returned by every ``parser.parse()`` call.
BudgetWorkbookParser  : Program sheets to normalised budget lines.
detect_columns        : Header scan returning a ``ColumnLayout``.
RowClassifier         : Ordered row rules with per-sheet fill-down context.
clean_budget_lines    : Post-pass validator over extracted lines.

Usage example::

    from budget_dashboard.parsers import BudgetWorkbookParser

    result = BudgetWorkbookParser("/path/to/Budget_2024.xlsx").parse()
    print(result.summary())
    for rec in result.records:
        if rec["_type"] == "budget_line":
            ...
"""

from .base_parser import BaseParser, ParseResult, cell_text, to_amount
from .budget_parser import FORMAT_BUDGET_PROGRAMMES, BudgetWorkbookParser, match_program_sheet
from .column_detector import ColumnLayout, detect_columns, find_header_row
from .row_classifier import Classification, HierarchyContext, RowClassifier, RowKind
from .validator import clean_budget_lines

__all__ = [
    "BaseParser",
    "ParseResult",
    "cell_text",
    "to_amount",
    "FORMAT_BUDGET_PROGRAMMES",
    "BudgetWorkbookParser",
    "match_program_sheet",
    "ColumnLayout",
    "detect_columns",
    "find_header_row",
    "Classification",
    "HierarchyContext",
    "RowClassifier",
    "RowKind",
    "clean_budget_lines",
]
