"""
Application-wide constants for the budget dashboard.

Defines the spreadsheet layout assumptions, parser thresholds, and
hierarchy defaults used by the ingestion pipeline and the services.
"""

from typing import Final

# ---------------------------------------------------------------------------
# Column-structure detection
# ---------------------------------------------------------------------------

# Number of rows scanned from the top of a sheet when looking for the header.
HEADER_SCAN_ROWS: Final[int] = 50

# 0-based column positions used when no header row is found.
DEFAULT_COLUMN_LAYOUT: Final[dict[str, int]] = {
    "activity": 1,
    "task": 2,
    "admin_code": 3,
    "admin_name": 4,
    "paragraph_code": 5,
    "paragraph_name": 6,
    "ae": 7,
    "cp": 8,
    "engaged": 9,
}

# ---------------------------------------------------------------------------
# Row classification
# ---------------------------------------------------------------------------

PARAGRAPH_CODE_LENGTH: Final[int] = 6

# Admin-unit codes are short; longer text in that column is a label, not a code.
ADMIN_CODE_MAX_LENGTH: Final[int] = 15

# Fill-down only accepts values longer than this many characters.
FILL_DOWN_MIN_LENGTH: Final[int] = 1

# ---------------------------------------------------------------------------
# Hierarchy defaults
# ---------------------------------------------------------------------------

DEFAULT_ACTION_CODE: Final[str] = "01"
DEFAULT_ACTION_NAME: Final[str] = "Action 01"
DEFAULT_ACTIVITY_CODE: Final[str] = "01"
DEFAULT_ACTIVITY_NAME: Final[str] = "Activité 01"
DEFAULT_TASK_NAME: Final[str] = "Tâche par défaut"

# Maximum length of a task name derived from an engagement description.
TASK_NAME_MAX_LENGTH: Final[int] = 100

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

# Lines with engaged > ae * ratio are reported, never dropped.
ENGAGED_WARNING_RATIO: Final[float] = 1.5

# ---------------------------------------------------------------------------
# Fiscal years
# ---------------------------------------------------------------------------

FISCAL_YEAR_MIN: Final[int] = 2000
# Upper bound is current year + this many years.
FISCAL_YEAR_LOOKAHEAD: Final[int] = 2

# ---------------------------------------------------------------------------
# Import audit states
# ---------------------------------------------------------------------------

IMPORT_STATUS_SUCCESS: Final[str] = "SUCCESS"
IMPORT_STATUS_FAILED: Final[str] = "FAILED"
