"""
app/schemas/bulk_import.py

Response schemas for bulk CSV upload endpoints and the alert trigger.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.bulk_import import BatchResult


class BatchSummaryResponse(BaseModel):
    """
    API response model for one bulk import call.
    """

    model_config = ConfigDict(populate_by_name=True)

    created_count: int = Field(..., ge=0, alias="createdCount")
    created: list[dict[str, Any]] = Field(default_factory=list)
    skipped: list[dict[str, Any]] = Field(default_factory=list)
    invalid: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[dict[str, Any]] = Field(default_factory=list)
    total_rows: int = Field(..., ge=0, alias="totalRows")

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchSummaryResponse":
        return cls.model_validate(result.to_dict())


class AlertRunResponse(BaseModel):
    """
    API response model for a manual run of the guardian attendance alert.
    """

    run_date: date
    skipped_holiday: bool
    students: int = Field(..., ge=0)
    emails_sent: int = Field(..., ge=0)
    sms_sent: int = Field(..., ge=0)
