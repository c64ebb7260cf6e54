"""
app/api/routers/timesheet.py

Timesheet upload, data, report download and maintenance endpoints.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_timesheet_upload
from app.config import get_timesheet_ingestion_settings
from app.domain.timesheet import IngestionSummary
from app.repositories.timesheet_entry_repository import TimesheetEntryRepository
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
from app.services.metric_service import FORMULA_DESCRIPTIONS
from app.services.report_composer import ReportComposer, get_report_composer
from app.services.report_export_service import TimesheetWorkbookExporter, get_workbook_exporter
from app.services.timesheet_ingestion_service import (
    SpreadsheetFormatError,
    TimesheetHeaderValidationError,
    TimesheetIngestionService,
    TimesheetPersistenceError,
    get_timesheet_ingestion_service,
)
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timesheet", tags=["timesheet"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _summary_response(summary: IngestionSummary) -> ImportSummaryResponse:
    return ImportSummaryResponse(
        source=summary.source,
        rows_read=summary.rows_read,
        rows_imported=summary.rows_imported,
        rows_skipped=summary.rows_skipped,
        validation_errors=[
            ImportErrorResponse(
                row_number=error.row_number,
                column=error.column,
                message=error.message,
                value=error.value,
            )
            for error in summary.validation_errors
        ],
    )


@router.get("/formulas", response_model=FormulaListResponse)
def get_formulas() -> FormulaListResponse:
    """
    Describe how each metric is computed.
    """

    return FormulaListResponse(formulas=dict(FORMULA_DESCRIPTIONS))


@router.post("/upload", response_model=TimesheetUploadResponse)
def upload_timesheet(
    file: UploadFile = Depends(get_timesheet_upload),
    team_name: str | None = Form(default=None, description="Team applied to every imported row"),
    db: Session = Depends(get_db),
    ingestion_service: TimesheetIngestionService = Depends(get_timesheet_ingestion_service),
) -> TimesheetUploadResponse:
    """
    Replace all stored entries with the rows of one timesheet export.
    """

    settings = get_timesheet_ingestion_settings()
    try:
        content = file.file.read(settings.max_upload_bytes + 1)
    finally:
        file.file.close()

    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload exceeds {settings.max_upload_bytes} bytes.",
        )

    try:
        result = ingestion_service.ingest(
            content=content,
            db=db,
            filename=file.filename,
            team_name=team_name or settings.default_team_name,
        )
    except (SpreadsheetFormatError, TimesheetHeaderValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except TimesheetPersistenceError as exc:
        logger.exception("Timesheet upload could not be persisted filename=%r", file.filename)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to store timesheet entries.",
        ) from exc

    return TimesheetUploadResponse(
        total_entries=len(result.entries),
        averages=AveragesResponse(**result.averages),
        summary=_summary_response(result.summary),
        download_available=bool(result.entries),
    )


@router.get("/data", response_model=TimesheetDataResponse)
def get_timesheet_data(
    db: Session = Depends(get_db),
    composer: ReportComposer = Depends(get_report_composer),
) -> TimesheetDataResponse:
    """
    Stored entries with averages, team and member statistics.
    """

    entries = TimesheetEntryRepository(db).list_all()
    if not entries:
        return TimesheetDataResponse(total_entries=0)

    report = composer.compose(entries)
    return TimesheetDataResponse(
        total_entries=len(entries),
        entries=[TimesheetEntryResponse(**entry.to_dict()) for entry in entries],
        averages=AveragesResponse(**report.averages),
        team_stats=report.team_stats,
        member_stats=report.member_stats,
    )


@router.get("/download")
def download_report(
    week_start: date | None = Query(default=None, description="Start of the completed-items window"),
    week_end: date | None = Query(default=None, description="End of the completed-items window"),
    db: Session = Depends(get_db),
    composer: ReportComposer = Depends(get_report_composer),
    exporter: TimesheetWorkbookExporter = Depends(get_workbook_exporter),
) -> Response:
    """
    Stream the styled weekly production report.
    """

    if (week_start is None) != (week_end is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="week_start and week_end must be provided together.",
        )
    if week_start is not None and week_end is not None and week_end < week_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="week_end must not be earlier than week_start.",
        )

    entries = TimesheetEntryRepository(db).list_all()
    if not entries:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No timesheet data available to export.",
        )

    report = composer.compose(entries, week_start=week_start, week_end=week_end)
    filename = exporter.build_filename(report.generated_at)
    return Response(
        content=exporter.render(report),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/recalculate", response_model=TimesheetRecalculateResponse)
def recalculate_metrics(
    db: Session = Depends(get_db),
    ingestion_service: TimesheetIngestionService = Depends(get_timesheet_ingestion_service),
) -> TimesheetRecalculateResponse:
    """
    Recompute cached metrics from the stored entry fields.
    """

    try:
        result = ingestion_service.recalculate(db=db)
    except TimesheetPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to store recalculated metrics.",
        ) from exc

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No timesheet data available for recalculation.",
        )

    return TimesheetRecalculateResponse(
        total_entries=len(result.entries),
        averages=AveragesResponse(**result.averages),
    )


@router.delete("/clear", response_model=TimesheetClearResponse)
def clear_timesheet_data(db: Session = Depends(get_db)) -> TimesheetClearResponse:
    """
    Delete every stored entry.
    """

    try:
        removed = TimesheetEntryRepository(db).clear()
    except TimesheetPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to clear timesheet entries.",
        ) from exc

    return TimesheetClearResponse(removed=removed)
