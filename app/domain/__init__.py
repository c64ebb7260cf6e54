"""
app/domain package marker.
"""

from app.domain.timesheet import (
    CanonicalEntry,
    IngestionSummary,
    InvalidTimesheetInputError,
    MetricSet,
    RowValidationError,
    WeeklyPoints,
)

__all__ = [
    "CanonicalEntry",
    "IngestionSummary",
    "InvalidTimesheetInputError",
    "MetricSet",
    "RowValidationError",
    "WeeklyPoints",
]
