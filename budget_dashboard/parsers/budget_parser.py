"""Parser for program budget workbooks (one worksheet per program).

Sheet layout
------------
- Sheet name: ``PROGRAMME 118``, ``PROG 118`` or ``P118``; the three digits
  are the program code and the full sheet name is the program name. Other
  sheets (summaries, notes) are skipped.
- A header row within the first 50 rows names the paragraph and AE columns;
  without one the default column layout applies.
- Below the header, action and activity header rows set the hierarchy,
  admin-unit cells and the activity / task columns fill down, and each row
  with a 6-digit paragraph code and a nonzero amount is one budget line.

Output record (``_type="budget_line"``)::

    program_code, program_name, action_code, action_name,
    activity_code, activity_name, task_name,
    admin_unit_code, admin_unit_name,
    paragraph_code, paragraph_name, ae, cp, engaged, balance
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Any

from budget_dashboard.parsers.base_parser import BaseParser, ParseResult, Sheet
from budget_dashboard.parsers.column_detector import detect_columns
from budget_dashboard.parsers.row_classifier import RowClassifier, RowKind
from budget_dashboard.parsers.validator import clean_budget_lines

logger = logging.getLogger(__name__)

FORMAT_BUDGET_PROGRAMMES = "BUDGET_PROGRAMMES"

# Exactly three digits, not followed by a fourth.
_PROGRAM_SHEET_RE = re.compile(r"^\s*(?:PROGRAMME|PROG|P)\s*(\d{3})(?!\d)")


def match_program_sheet(sheet_name: str) -> str | None:
    """Return the program code encoded in a sheet name, or ``None``."""
    match = _PROGRAM_SHEET_RE.match(sheet_name.upper())
    return match.group(1) if match else None


class BudgetWorkbookParser(BaseParser):
    """Extract budget lines from every program sheet of a workbook.

    Metadata keys set on the result:
        sheets_processed: Names of the program sheets that were read.
        skipped_sheets: Names of the sheets ignored by the name filter.
        rows_by_kind: Count of classified rows per ``RowKind`` value.
        lines_extracted: Lines emitted before validation.
        lines_dropped: Lines removed by the validator.
    """

    FORMAT_NAME = FORMAT_BUDGET_PROGRAMMES

    def parse(self) -> ParseResult:
        sheets = self._load_sheets()
        processed: list[str] = []
        skipped: list[str] = []
        kinds: Counter[str] = Counter()
        extracted: list[dict[str, Any]] = []

        for sheet in sheets:
            program_code = match_program_sheet(sheet.name)
            if program_code is None:
                logger.debug("Skipping sheet '%s': not a program sheet", sheet.name)
                skipped.append(sheet.name)
                continue
            lines = self._parse_sheet(sheet, program_code, kinds)
            logger.info("Sheet '%s': %d budget lines", sheet.name, len(lines))
            processed.append(sheet.name)
            extracted.extend(lines)

        kept, warnings = clean_budget_lines(extracted)
        self.result.records = kept
        self.result.warnings.extend(warnings)
        self.result.metadata.update(
            {
                "sheets_processed": processed,
                "skipped_sheets": skipped,
                "rows_by_kind": dict(kinds),
                "lines_extracted": len(extracted),
                "lines_dropped": len(extracted) - len(kept),
            }
        )
        logger.info(self.result.summary())
        return self.result

    def _parse_sheet(
        self, sheet: Sheet, program_code: str, kinds: Counter[str]
    ) -> list[dict[str, Any]]:
        layout = detect_columns(sheet.rows)
        start = 0 if layout.header_row is None else layout.header_row + 1
        classifier = RowClassifier(
            layout,
            program_code=program_code,
            program_name=sheet.name.strip(),
            sheet_name=sheet.name,
        )

        lines: list[dict[str, Any]] = []
        for idx in range(start, len(sheet.rows)):
            row = sheet.rows[idx]
            if self._is_empty_row(row):
                continue
            # 1-based row numbers, as shown by spreadsheet tools
            outcome = classifier.classify(row, row_number=idx + 1)
            kinds[outcome.kind.value] += 1
            if outcome.kind is RowKind.BUDGET_LINE and outcome.line is not None:
                lines.append(outcome.line)
        return lines
