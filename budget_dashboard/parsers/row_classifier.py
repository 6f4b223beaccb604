"""Row classification and hierarchy context tracking for budget sheets.

Each data row goes through an ordered list of ``(name, rule)`` pairs. A rule
returns a ``Classification`` to stop processing the row, or ``None`` to let
the next rule look at it. Rules mutate the ``HierarchyContext`` owned by the
classifier, which is created fresh for every sheet.

Rule order:
1. skip          total rows and repeated label rows
2. action        "Action 01 : Name" headers
3. activity      "[01] Name", "Activité 01: Name", "01 - Name" headers
4. fill_down     activity / task columns (never terminal)
5. admin_unit    admin code or name cell
6. budget_line   6-digit paragraph code with at least one nonzero amount
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from budget_dashboard.parsers.base_parser import cell_text, to_amount
from budget_dashboard.parsers.column_detector import ColumnLayout
from budget_dashboard.utils.constants import (
    ADMIN_CODE_MAX_LENGTH,
    DEFAULT_ACTION_CODE,
    DEFAULT_ACTION_NAME,
    DEFAULT_ACTIVITY_CODE,
    DEFAULT_ACTIVITY_NAME,
    FILL_DOWN_MIN_LENGTH,
    PARAGRAPH_CODE_LENGTH,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_TOTAL_PATTERNS: tuple[str, ...] = (
    "total programme",
    "total action",
    "total activité",
    "total activite",
    "montant total",
    "répartition",
)

# Label cells repeated inside the data area (column titles of sub-tables).
_LABEL_LITERALS: frozenset[str] = frozenset(
    {"activités", "activites", "tâches", "taches", "paragraphes", "libellé", "libelle"}
)

_ACTION_RE = re.compile(r"^action\s+(\d+)\s*:(.+)", re.IGNORECASE)

# Tried in order; the first that matches a cell wins.
_ACTIVITY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\[(\d{1,3})\]\s*(.+)$"),
    re.compile(r"^activit[ée]\s+(\d{1,3})\s*:\s*(.+)$", re.IGNORECASE),
    re.compile(r"^(\d{1,3})\s*-\s*(.+)$"),
)
_TOTAL_ACTIVITY_PREFIX_RE = re.compile(r"^total\s+activit[ée]\s+", re.IGNORECASE)

_PARAGRAPH_RE = re.compile(r"^\d{%d}$" % PARAGRAPH_CODE_LENGTH)
_WHITESPACE_RE = re.compile(r"\s+")


def match_activity(text: str) -> tuple[str, str] | None:
    """Return ``(code, name)`` when ``text`` is an activity header cell."""
    for pattern in _ACTIVITY_PATTERNS:
        match = pattern.match(text)
        if match:
            code = match.group(1).zfill(2)
            name = _TOTAL_ACTIVITY_PREFIX_RE.sub("", match.group(2).strip())
            return code, name
    return None


def normalize_paragraph_code(value: Any) -> str:
    """Paragraph cell text with all internal whitespace removed."""
    return _WHITESPACE_RE.sub("", cell_text(value))


def is_paragraph_code(value: Any) -> bool:
    return bool(_PARAGRAPH_RE.match(normalize_paragraph_code(value)))


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class RowKind(str, Enum):
    SKIP = "skip"
    ACTION = "action"
    ACTIVITY = "activity"
    ADMIN_UNIT = "admin_unit"
    BUDGET_LINE = "budget_line"
    PLACEHOLDER = "placeholder"
    UNCLASSIFIED = "unclassified"


@dataclass
class HierarchyContext:
    """Fill-down state for one sheet.

    Program fields are fixed from the sheet name; every other field keeps its
    last value until a header or a non-empty column cell replaces it.
    """

    program_code: str
    program_name: str
    action_code: str = DEFAULT_ACTION_CODE
    action_name: str = DEFAULT_ACTION_NAME
    activity_code: str = DEFAULT_ACTIVITY_CODE
    activity_name: str = DEFAULT_ACTIVITY_NAME
    task_name: str = ""
    admin_code: str = ""
    admin_name: str = ""

    def set_action(self, code: str, name: str) -> None:
        self.action_code = code
        self.action_name = name
        self.activity_code = DEFAULT_ACTIVITY_CODE
        self.activity_name = DEFAULT_ACTIVITY_NAME
        self.task_name = ""

    def set_activity(self, code: str, name: str) -> None:
        self.activity_code = code
        self.activity_name = name
        self.task_name = ""

    def set_admin_unit(self, code: str, name: str) -> None:
        self.admin_code = code
        self.admin_name = name or code


@dataclass
class Classification:
    """Outcome for one row: its kind and, for budget lines, the record."""

    kind: RowKind
    rule: str = ""
    line: Optional[dict[str, Any]] = None


@dataclass
class _Row:
    """Row view with the cells the rules need, flattened once."""

    cells: list[Any]
    layout: ColumnLayout
    texts: list[str] = field(default_factory=list)
    lower: str = ""

    def __post_init__(self) -> None:
        self.texts = [cell_text(value) for value in self.cells]
        self.lower = " ".join(t for t in self.texts if t).lower()

    def raw(self, name: str) -> Any:
        idx = self.layout[name]
        return self.cells[idx] if 0 <= idx < len(self.cells) else None

    def text(self, name: str) -> str:
        idx = self.layout[name]
        return self.texts[idx] if 0 <= idx < len(self.texts) else ""


Rule = Callable[[_Row], Optional[Classification]]


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class RowClassifier:
    """Classify the data rows of one sheet, tracking hierarchy context.

    Usage::

        classifier = RowClassifier(layout, "118", "PROGRAMME 118", sheet_name="PROGRAMME 118")
        for row_number, row in enumerate(rows, start=1):
            outcome = classifier.classify(row, row_number)
            if outcome.line is not None:
                lines.append(outcome.line)
    """

    def __init__(
        self,
        layout: ColumnLayout,
        program_code: str,
        program_name: str,
        sheet_name: str = "",
    ) -> None:
        self.layout = layout
        self.sheet_name = sheet_name or program_name
        self._row_number = 0
        self.context = HierarchyContext(program_code=program_code, program_name=program_name)
        self.rules: tuple[tuple[str, Rule], ...] = (
            ("skip", self._skip_rule),
            ("action", self._action_rule),
            ("activity", self._activity_rule),
            ("fill_down", self._fill_down_rule),
            ("admin_unit", self._admin_unit_rule),
            ("budget_line", self._budget_line_rule),
        )

    def classify(self, cells: list[Any], row_number: int = 0) -> Classification:
        """Run the rules over one row; the first non-``None`` outcome wins."""
        row = _Row(cells=list(cells), layout=self.layout)
        self._row_number = row_number
        if not row.lower:
            return Classification(RowKind.UNCLASSIFIED)
        for name, rule in self.rules:
            outcome = rule(row)
            if outcome is not None:
                outcome.rule = name
                return outcome
        return Classification(RowKind.UNCLASSIFIED)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _skip_rule(self, row: _Row) -> Classification | None:
        if any(pattern in row.lower for pattern in _TOTAL_PATTERNS):
            return Classification(RowKind.SKIP)
        if any(text.lower() in _LABEL_LITERALS for text in row.texts):
            return Classification(RowKind.SKIP)
        return None

    def _action_rule(self, row: _Row) -> Classification | None:
        for text in row.texts:
            match = _ACTION_RE.match(text)
            if match:
                self.context.set_action(match.group(1).zfill(2), match.group(2).strip())
                logger.debug(
                    "%s row %d: action %s", self.sheet_name, self._row_number, self.context.action_code
                )
                return Classification(RowKind.ACTION)
        return None

    def _activity_rule(self, row: _Row) -> Classification | None:
        if row.text("paragraph_code"):
            return None
        for text in row.texts:
            found = match_activity(text)
            if found:
                self.context.set_activity(*found)
                logger.debug("%s row %d: activity %s", self.sheet_name, self._row_number, found[0])
                return Classification(RowKind.ACTIVITY)
        return None

    def _fill_down_rule(self, row: _Row) -> None:
        activity = row.text("activity")
        if _fills_down(activity):
            found = match_activity(activity)
            code, name = found if found else (self.context.activity_code, activity)
            if (code, name) != (self.context.activity_code, self.context.activity_name):
                self.context.set_activity(code, name)

        task = row.text("task")
        if _fills_down(task):
            self.context.task_name = task
        return None

    def _admin_unit_rule(self, row: _Row) -> Classification | None:
        if "total" in row.lower:
            return None
        code = row.text("admin_code")
        name = row.text("admin_name") if self.layout["admin_name"] != self.layout["admin_code"] else ""
        if not code:
            code = name
        if not _is_admin_code(code):
            return None
        self.context.set_admin_unit(code, name)
        if is_paragraph_code(row.raw("paragraph_code")):
            return None
        return Classification(RowKind.ADMIN_UNIT)

    def _budget_line_rule(self, row: _Row) -> Classification | None:
        paragraph_code = normalize_paragraph_code(row.raw("paragraph_code"))
        if not _PARAGRAPH_RE.match(paragraph_code) or "total" in row.lower:
            return None

        ae = to_amount(row.raw("ae"))
        cp = to_amount(row.raw("cp"))
        engaged = to_amount(row.raw("engaged"))
        if ae == 0 and cp == 0 and engaged == 0:
            return Classification(RowKind.PLACEHOLDER)

        ctx = self.context
        line = {
            "program_code": ctx.program_code,
            "program_name": ctx.program_name,
            "action_code": ctx.action_code,
            "action_name": ctx.action_name,
            "activity_code": ctx.activity_code,
            "activity_name": ctx.activity_name,
            "task_name": ctx.task_name,
            "admin_unit_code": ctx.admin_code,
            "admin_unit_name": ctx.admin_name,
            "paragraph_code": paragraph_code,
            "paragraph_name": row.text("paragraph_name"),
            "ae": ae,
            "cp": cp,
            "engaged": engaged,
            "balance": ae - engaged,
            "_type": "budget_line",
            "_sheet": self.sheet_name,
            "_row": self._row_number,
        }
        return Classification(RowKind.BUDGET_LINE, line=line)


def _fills_down(text: str) -> bool:
    return len(text) > FILL_DOWN_MIN_LENGTH and "total" not in text.lower()


def _is_admin_code(text: str) -> bool:
    return (
        len(text) > FILL_DOWN_MIN_LENGTH
        and len(text) < ADMIN_CODE_MAX_LENGTH
        and not _PARAGRAPH_RE.match(text)
    )
