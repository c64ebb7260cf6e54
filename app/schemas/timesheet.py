"""
app/schemas/timesheet.py

Request/response schemas for timesheet endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class WeeklyPointsResponse(BaseModel):
    item_id: str | None = None
    log_owner: str | None = None
    total_hours: float = 0.0
    weekly_points: float = 0.0


class TimesheetEntryResponse(BaseModel):
    """
    One stored entry with its cached metrics.
    """

    item_id: str | None = None
    log_owner: str | None = None
    team_name: str | None = None
    item_name: str | None = None
    item_detail: str | None = None
    epic: str | None = None
    item_type: str | None = None
    reported_by: str | None = None
    log_type: str | None = None
    remarks: str | None = None
    zoho_link: str | None = None
    status: str | None = None
    application: str | None = None
    project_name: str | None = None
    sprint: str | None = None
    priority: str | None = None
    log_hours_decimal: float | None = None
    estimated_points: float | None = None
    actual_points: float | None = None
    log_date: datetime | None = None
    requested_date: datetime | None = None
    expected_start_date: datetime | None = None
    expected_release_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_release_date: datetime | None = None
    start_date: datetime | None = None
    release_date: datetime | None = None
    completed_on: datetime | None = None
    lead_time: float = 0.0
    cycle_time: float = 0.0
    defects_density: int = Field(default=0, ge=0, le=1)
    weekly_points: list[WeeklyPointsResponse] = Field(default_factory=list)
    story_point_accuracy: float = 0.0
    release_delay: float = 0.0


class AveragesResponse(BaseModel):
    total_estimated_points: float = 0
    total_actual_points: float = 0
    total_weekly_points: float = 0
    average_lead_time: float = 0
    average_cycle_time: float = 0
    average_defects_density: float = 0
    average_story_point_accuracy: float = 0
    average_release_delay: float = 0


class ImportErrorResponse(BaseModel):
    """
    API response model for one row-level import problem.
    """

    row_number: int = Field(..., ge=1)
    message: str
    column: str | None = None
    value: str | None = None


class ImportSummaryResponse(BaseModel):
    source: str
    rows_read: int = Field(..., ge=0)
    rows_imported: int = Field(..., ge=0)
    rows_skipped: int = Field(..., ge=0)
    validation_errors: list[ImportErrorResponse] = Field(default_factory=list)


class TimesheetUploadResponse(BaseModel):
    total_entries: int = Field(..., ge=0)
    averages: AveragesResponse
    summary: ImportSummaryResponse
    download_available: bool = True


class TimesheetDataResponse(BaseModel):
    """
    Stored entries and the aggregate summaries; empty when nothing is stored.
    """

    total_entries: int = Field(..., ge=0)
    entries: list[TimesheetEntryResponse] = Field(default_factory=list)
    averages: AveragesResponse = Field(default_factory=AveragesResponse)
    team_stats: dict[str, Any] = Field(default_factory=dict)
    member_stats: dict[str, dict[str, Any]] = Field(default_factory=dict)


class TimesheetRecalculateResponse(BaseModel):
    total_entries: int = Field(..., ge=0)
    averages: AveragesResponse


class TimesheetClearResponse(BaseModel):
    removed: int = Field(..., ge=0)


class FormulaListResponse(BaseModel):
    formulas: dict[str, str]
