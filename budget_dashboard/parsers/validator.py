"""Post-pass filter over the budget lines extracted from every sheet."""

from __future__ import annotations

import logging
from typing import Any

from budget_dashboard.utils.constants import ENGAGED_WARNING_RATIO, PARAGRAPH_CODE_LENGTH

logger = logging.getLogger(__name__)

_AMOUNT_FIELDS: tuple[str, ...] = ("ae", "cp", "engaged")


def _where(line: dict[str, Any]) -> str:
    return f"{line.get('_sheet', '?')} row {line.get('_row', '?')}"


def clean_budget_lines(
    lines: list[dict[str, Any]],
) -> tuple[list[dict[str, Any]], list[str]]:
    """Drop malformed lines and report anomalies.

    A line is dropped when its paragraph code is missing or not exactly six
    characters long, or when any amount is negative. A line whose engaged
    amount exceeds ``ENGAGED_WARNING_RATIO`` times its AE is kept and
    reported.

    Returns:
        ``(kept_lines, warnings)``; ``kept_lines`` preserves input order.
    """
    kept: list[dict[str, Any]] = []
    warnings: list[str] = []

    for line in lines:
        code = str(line.get("paragraph_code") or "")
        if len(code) != PARAGRAPH_CODE_LENGTH:
            logger.debug("Dropping line with paragraph code %r (%s)", code, _where(line))
            continue

        negatives = [name for name in _AMOUNT_FIELDS if (line.get(name) or 0) < 0]
        if negatives:
            logger.debug(
                "Dropping line %s with negative %s (%s)", code, ", ".join(negatives), _where(line)
            )
            continue

        ae = line.get("ae") or 0
        engaged = line.get("engaged") or 0
        if engaged > ae * ENGAGED_WARNING_RATIO:
            msg = (
                f"Paragraph {code} ({_where(line)}): engaged {engaged:,.2f} "
                f"exceeds {ENGAGED_WARNING_RATIO} x AE {ae:,.2f}"
            )
            logger.warning(msg)
            warnings.append(msg)

        kept.append(line)

    dropped = len(lines) - len(kept)
    if dropped:
        logger.info("Validator dropped %d of %d budget lines", dropped, len(lines))
    return kept, warnings
