"""Abstract base class for budget workbook parsers.

Provides shared infrastructure for loading workbooks into a sheet-oriented
in-memory model and for flattening cell values before format-specific
subclasses do their classification logic.
"""

from __future__ import annotations

import io
import logging
import math
import numbers
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd
from openpyxl.cell.rich_text import CellRichText, TextBlock

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class ParseResult:
    """Container returned by every parser after processing a workbook.

    Attributes:
        records: List of dicts ready for the upsert coordinator.
            Each dict key matches a budget-line field name; keys prefixed
            with ``_`` are parser-internal (sheet, row number, record type).
        errors: Structural problems (workbook or sheet could not be read).
        warnings: Non-fatal oddities (line was kept but may need review).
        metadata: Sheets processed / skipped and row counters.
        format_name: Parser format identifier string.
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    format_name: str = "UNKNOWN"

    @property
    def ok(self) -> bool:
        """True when no fatal errors were collected."""
        return len(self.errors) == 0

    @property
    def record_count(self) -> int:
        """Number of successfully parsed data records."""
        return len(self.records)

    def summary(self) -> str:
        """One-line human-readable summary of the parse run."""
        status = "OK" if self.ok else "ERROR"
        return (
            f"[{status}] format={self.format_name} "
            f"records={self.record_count} "
            f"errors={len(self.errors)} "
            f"warnings={len(self.warnings)}"
        )


@dataclass
class Sheet:
    """One worksheet as a list of rows of raw cell values."""

    name: str
    rows: list[list[Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Cell normalisation
# ---------------------------------------------------------------------------

_AMOUNT_NOISE_RE = re.compile(r"[\s.€$]")


def cell_text(value: Any) -> str:
    """Flatten a cell value to its stripped display string.

    Rich-text run lists are joined, integral floats lose their ``.0`` and
    NaN / None / unsupported shapes become an empty string. Never raises.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (numbers.Real, Decimal)):
        number = float(value)
        if math.isnan(number):
            return ""
        if math.isfinite(number) and number.is_integer():
            return str(int(number))
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, CellRichText):
        return "".join(
            run.text if isinstance(run, TextBlock) else str(run) for run in value
        ).strip()
    if isinstance(value, (list, tuple)):
        parts = (getattr(run, "text", run) for run in value)
        return "".join(p if isinstance(p, str) else cell_text(p) for p in parts).strip()
    text = getattr(value, "text", None)
    if isinstance(text, str):
        return text.strip()
    return ""


def to_amount(value: Any) -> float:
    """Parse a cell value to float; anything unparsable is ``0.0``.

    Numbers pass through. Text follows the French convention: spaces and
    dots are thousands separators and the comma is the decimal mark, so
    ``"1 000 000,50"`` and ``"1.000.000,50"`` both read as ``1000000.5``.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (numbers.Real, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    cleaned = _AMOUNT_NOISE_RE.sub("", cell_text(value)).replace(",", ".")
    if not cleaned or cleaned in ("-", "—"):
        return 0.0
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


# ---------------------------------------------------------------------------
# Base parser
# ---------------------------------------------------------------------------


class BaseParser(ABC):
    """Abstract base for workbook parsers.

    Subclasses must implement ``parse()``.

    The constructor accepts a file path string, raw bytes, or an open
    binary-mode file object so it works both from the filesystem and from
    FastAPI ``UploadFile.read()``.

    Attributes:
        workbook_bytes: Raw bytes of the workbook; ``_open_excel`` wraps them.
        result: Accumulated ``ParseResult`` (populated during ``parse()``).
    """

    # Name to assign in ``ParseResult.format_name``; override in subclasses.
    FORMAT_NAME: str = "UNKNOWN"

    def __init__(self, file_path_or_bytes: str | Path | bytes | BinaryIO) -> None:
        self.workbook_bytes: bytes = self._read_source(file_path_or_bytes)
        self.result: ParseResult = ParseResult(format_name=self.FORMAT_NAME)

    @staticmethod
    def _read_source(source: str | Path | bytes | BinaryIO) -> bytes:
        """Normalise any input type to raw bytes."""
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)
        if isinstance(source, (str, Path)):
            return Path(source).read_bytes()
        # File-like object (e.g. SpooledTemporaryFile from FastAPI)
        data = source.read()
        return data if isinstance(data, bytes) else data.encode()

    def _open_excel(self) -> io.BytesIO:
        """Return a BytesIO handle positioned at byte 0."""
        return io.BytesIO(self.workbook_bytes)

    # ------------------------------------------------------------------
    # Workbook loading
    # ------------------------------------------------------------------

    def _load_sheets(self) -> list[Sheet]:
        """Load every worksheet as raw rows using the openpyxl engine.

        Cells keep their native type (numbers stay numbers, formulas come
        back as their cached result). A workbook that cannot be opened, or a
        sheet that cannot be read, is recorded in ``self.result.errors``.
        """
        try:
            xl = pd.ExcelFile(self._open_excel(), engine="openpyxl")
        except Exception as exc:
            msg = f"Failed to open workbook: {exc}"
            logger.error(msg)
            self.result.errors.append(msg)
            return []

        sheets: list[Sheet] = []
        with xl:
            for name in xl.sheet_names:
                try:
                    df = xl.parse(sheet_name=name, header=None, dtype=object)
                except Exception as exc:
                    msg = f"Failed to load sheet '{name}': {exc}"
                    logger.error(msg)
                    self.result.errors.append(msg)
                    continue
                sheets.append(Sheet(name=str(name), rows=df.values.tolist()))
        return sheets

    # ------------------------------------------------------------------
    # Value normalisation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_empty_row(row: list[Any]) -> bool:
        """True when every cell in the row flattens to an empty string."""
        return not any(cell_text(val) for val in row)

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abstractmethod
    def parse(self) -> ParseResult:
        """Execute the full parsing pipeline and return a ``ParseResult``.

        Implementations should:
        1. Load the workbook via ``_load_sheets``.
        2. Select and classify rows, appending dicts to ``self.result.records``.
        3. Log skipped data to ``self.result.warnings``.
        4. Return ``self.result``.
        """
