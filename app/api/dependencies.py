"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

TIMESHEET_EXTENSIONS = (".xlsx", ".xls", ".csv")

TIMESHEET_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def get_timesheet_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a spreadsheet by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_sheet_filename = filename.endswith(TIMESHEET_EXTENSIONS)
    is_sheet_content_type = content_type in TIMESHEET_CONTENT_TYPES

    if not is_sheet_filename and not is_sheet_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx, .xls or .csv files are allowed.",
        )

    return file
