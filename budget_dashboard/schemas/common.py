"""Shared Pydantic v2 schemas reused across modules."""

from __future__ import annotations

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Generic acknowledgement returned by write endpoints with no body."""

    message: str = Field(..., description="Human-readable outcome.")
    id: int | None = Field(default=None, description="ID of the affected row, if any.")
