"""
app/schemas package marker.
"""

from app.schemas.timesheet import (
    AveragesResponse,
    FormulaListResponse,
    ImportErrorResponse,
    ImportSummaryResponse,
    TimesheetClearResponse,
    TimesheetDataResponse,
    TimesheetEntryResponse,
    TimesheetRecalculateResponse,
    TimesheetUploadResponse,
)

__all__ = [
    "AveragesResponse",
    "FormulaListResponse",
    "ImportErrorResponse",
    "ImportSummaryResponse",
    "TimesheetClearResponse",
    "TimesheetDataResponse",
    "TimesheetEntryResponse",
    "TimesheetRecalculateResponse",
    "TimesheetUploadResponse",
]
