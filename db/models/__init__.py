"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.timesheet_entry import TimesheetEntryRecord

__all__ = [
    "TimesheetEntryRecord",
]
