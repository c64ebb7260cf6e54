"""
app/repositories package marker.
"""

from app.repositories.timesheet_entry_repository import (
    TimesheetEntryRepository,
    TimesheetPersistenceError,
)

__all__ = [
    "TimesheetEntryRepository",
    "TimesheetPersistenceError",
]
