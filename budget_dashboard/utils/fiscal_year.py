"""Fiscal-year inference from uploaded filenames."""

from __future__ import annotations

import re
from datetime import date

from budget_dashboard.utils.constants import FISCAL_YEAR_LOOKAHEAD, FISCAL_YEAR_MIN

# A standalone 4-digit year in 1900-2099, not part of a longer number.
_YEAR_TOKEN_RE = re.compile(r"(?<!\d)(19\d{2}|20\d{2})(?!\d)")


def infer_fiscal_year(filename: str | None, today: date | None = None) -> int:
    """Return the first plausible year token in ``filename``.

    A token is plausible when it lies between ``FISCAL_YEAR_MIN`` and the
    current year plus ``FISCAL_YEAR_LOOKAHEAD``. Falls back to the current
    calendar year.

    Examples::

        infer_fiscal_year("Budget_2024_final.xlsx")  # 2024
        infer_fiscal_year("budget.xlsx")             # current year
    """
    current = (today or date.today()).year
    for token in _YEAR_TOKEN_RE.findall(filename or ""):
        year = int(token)
        if FISCAL_YEAR_MIN <= year <= current + FISCAL_YEAR_LOOKAHEAD:
            return year
    return current
