"""
Budget import router.

Mounts under ``/api/import`` (prefix set in ``main.py``).

Endpoints
---------
POST /budget   Upload a budget workbook (one sheet per program).
GET  /history  List past import records (most-recent-first).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from budget_dashboard.database import get_db
from budget_dashboard.schemas.imports import ImportHistoryItem, ImportResult
from budget_dashboard.services import import_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Import"])

_ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset(
    {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
        "application/octet-stream",  # some browsers send this for .xlsx
    }
)


def _check_content_type(file: UploadFile) -> None:
    """Log uploads whose MIME type does not look like a workbook.

    The upload still goes through: openpyxl is the real format check and a
    file it cannot open comes back as a failed import.
    """
    content_type = file.content_type or ""
    if content_type not in _ALLOWED_CONTENT_TYPES:
        logger.warning(
            "Unexpected content_type='%s' for file='%s', proceeding anyway",
            content_type,
            file.filename,
        )


@router.post(
    "/budget",
    response_model=ImportResult,
    status_code=status.HTTP_200_OK,
    summary="Import a budget workbook",
    responses={
        200: {"description": "Import outcome; failures have success=false and an error."},
        422: {"description": "Empty upload."},
        500: {"description": "The import record could not be saved."},
    },
)
async def upload_budget(
    file: Annotated[UploadFile, File(description="Budget workbook (.xlsx)")],
    db: Annotated[Session, Depends(get_db)],
) -> ImportResult:
    """Parse the workbook and store its budget lines.

    Parse and persistence failures are reported in the body, not as HTTP
    errors.
    """
    _check_content_type(file)
    try:
        return await import_service.process_upload(db=db, file=file)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    except RuntimeError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc


@router.get(
    "/history",
    response_model=list[ImportHistoryItem],
    summary="Import history",
)
def import_history(
    db: Annotated[Session, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[ImportHistoryItem]:
    return import_service.get_history(db, limit=limit)
