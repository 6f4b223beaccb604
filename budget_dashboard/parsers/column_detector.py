"""Locate the header row of a budget sheet and map semantic fields to columns.

Detection strategy:
1. Scan the first ``HEADER_SCAN_ROWS`` rows for one whose joined text mentions
   both a paragraph column and an AE (authorized amount) column.
2. Map each header cell to a field with an ordered keyword rule list; the
   first rule matching a cell wins and a field keeps the first column it got.
3. Fields the header does not name keep their ``DEFAULT_COLUMN_LAYOUT`` index,
   unless a named field already sits there; such fields become
   ``UNMAPPED_COLUMN`` and read as empty cells.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from budget_dashboard.parsers.base_parser import cell_text
from budget_dashboard.utils.constants import DEFAULT_COLUMN_LAYOUT, HEADER_SCAN_ROWS

logger = logging.getLogger(__name__)

# Index for a field with no column on the sheet.
UNMAPPED_COLUMN = -1

# ---------------------------------------------------------------------------
# Keyword patterns
# ---------------------------------------------------------------------------

_AE_RE = re.compile(r"\bae\b|autoris|authorized")
_CP_RE = re.compile(r"\bcp\b|credit|crédit")
_ADMIN_RE = re.compile(r"d[ée]part|admin")
_TASK_RE = re.compile(r"tâche|tache|task")


@dataclass
class ColumnLayout:
    """Resolved field → 0-based column index mapping for one sheet.

    Attributes:
        columns: Index for every field in ``DEFAULT_COLUMN_LAYOUT``;
            ``UNMAPPED_COLUMN`` when the field has no column.
        header_row: Index of the detected header row, or ``None`` when the
            sheet has no recognisable header and the defaults apply.
        detected: Fields whose index came from the header rather than the
            defaults.
    """

    columns: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_COLUMN_LAYOUT))
    header_row: int | None = None
    detected: set[str] = field(default_factory=set)

    def __getitem__(self, name: str) -> int:
        return self.columns[name]


def _row_text(row: list[Any]) -> str:
    return " ".join(cell_text(value) for value in row).lower()


def is_header_row(row: list[Any]) -> bool:
    """True when the row names both a paragraph column and an AE column."""
    text = _row_text(row)
    return "paragraph" in text and bool(_AE_RE.search(text))


def find_header_row(rows: list[list[Any]]) -> int | None:
    """Return the index of the header row within the scan window, if any."""
    for idx, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        if is_header_row(row):
            return idx
    return None


def _match_field(text: str) -> str | None:
    """Map one lower-cased header cell to a field name."""
    if "paragraph" in text and "code" in text:
        return "paragraph_code"
    if "paragraph" in text or "label" in text or "libell" in text:
        return "paragraph_name"
    if _AE_RE.search(text):
        return "ae"
    if _CP_RE.search(text):
        return "cp"
    if "engag" in text:
        return "engaged"
    if _ADMIN_RE.search(text):
        return "admin_code"
    if "activit" in text:
        return "activity"
    if _TASK_RE.search(text):
        return "task"
    return None


def map_header_cells(row: list[Any]) -> dict[str, int]:
    """Return the fields named by a header row and their column indexes.

    ``admin_name`` is not named by the header: it sits right after the admin
    code column, unless that column already holds another detected field, in
    which case the code column doubles as the name column.
    """
    mapping: dict[str, int] = {}
    for idx, value in enumerate(row):
        text = cell_text(value).lower()
        if not text:
            continue
        name = _match_field(text)
        if name is not None and name not in mapping:
            mapping[name] = idx

    if "admin_code" in mapping:
        next_col = mapping["admin_code"] + 1
        if next_col in mapping.values():
            mapping["admin_name"] = mapping["admin_code"]
        else:
            mapping["admin_name"] = next_col
    return mapping


def detect_columns(rows: list[list[Any]]) -> ColumnLayout:
    """Detect the column layout of a sheet given its raw rows."""
    layout = ColumnLayout()
    header_idx = find_header_row(rows)
    if header_idx is None:
        logger.debug("No header row found; using default column layout")
        return layout

    detected = map_header_cells(rows[header_idx])
    claimed = set(detected.values())
    for name, default_idx in DEFAULT_COLUMN_LAYOUT.items():
        if name in detected:
            layout.columns[name] = detected[name]
        elif default_idx in claimed:
            layout.columns[name] = UNMAPPED_COLUMN
        else:
            layout.columns[name] = default_idx
    layout.header_row = header_idx
    layout.detected = set(detected)
    logger.debug("Header at row %d, detected columns: %s", header_idx, detected)
    return layout
