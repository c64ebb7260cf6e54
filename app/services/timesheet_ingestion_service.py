"""
app/services/timesheet_ingestion_service.py

Service layer for the timesheet import workflow.

One upload runs one full pass:

    1. SpreadsheetReader        bytes -> headers + raw rows
    2. FieldNormalizer          raw rows -> canonical mappings (fallbacks applied once)
    3. TimesheetRowParser       canonical mappings -> CanonicalEntry
    4. TimesheetMetricService   metrics computed in memory and cached on each entry
    5. Repository.replace_all   the staged batch replaces the store in one transaction

Nothing touches storage until the whole file has been staged, so a file
that fails structurally leaves the previous import in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import get_timesheet_ingestion_settings, get_timesheet_report_settings
from app.domain.timesheet import CanonicalEntry, IngestionSummary, RowValidationError
from app.logging_utils import IngestionObserver, LoggingIngestionObserver
from app.mappers.field_normalizer import FieldNormalizer
from app.repositories.timesheet_entry_repository import (
    TimesheetEntryRepository,
    TimesheetPersistenceError,
)
from app.services.aggregation_service import TimesheetAggregationService
from app.services.metric_service import TimesheetMetricService
from app.services.spreadsheet_reader import SpreadsheetFormatError, SpreadsheetReader, SpreadsheetTable
from app.validators.value_parser import TimesheetRowParser

logger = logging.getLogger(__name__)

__all__ = [
    "SpreadsheetFormatError",
    "TimesheetHeaderValidationError",
    "TimesheetImportResult",
    "TimesheetIngestionService",
    "TimesheetPersistenceError",
    "get_timesheet_ingestion_service",
]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TimesheetHeaderValidationError(ValueError):
    """
    Raised when the header row maps to no known timesheet field.
    """

    def __init__(self, message: str, *, headers: list[str]) -> None:
        super().__init__(message)
        self.headers = tuple(headers)

    def to_dict(self) -> dict[str, object]:
        return {"message": str(self), "headers": list(self.headers)}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimesheetImportResult:
    """
    Entries as stored, their averages and the import summary.
    """

    entries: list[CanonicalEntry]
    averages: dict[str, float]
    summary: IngestionSummary


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TimesheetIngestionService:
    """
    Coordinates reading, normalization, parsing, metrics and replacement.
    """

    def __init__(
        self,
        *,
        header_row_offset: int,
        max_validation_errors: int,
        observer: IngestionObserver | None = None,
        reader: SpreadsheetReader | None = None,
        normalizer: FieldNormalizer | None = None,
        row_parser: TimesheetRowParser | None = None,
        metric_service: TimesheetMetricService | None = None,
        aggregation_service: TimesheetAggregationService | None = None,
    ) -> None:
        self._max_validation_errors = max(1, max_validation_errors)
        self._observer: IngestionObserver = observer or LoggingIngestionObserver()
        self._reader = reader or SpreadsheetReader(start_offset=header_row_offset)
        self._normalizer = normalizer or FieldNormalizer()
        self._row_parser = row_parser or TimesheetRowParser()
        self._metric_service = metric_service or TimesheetMetricService()
        self._aggregation_service = aggregation_service or TimesheetAggregationService(
            metric_service=self._metric_service
        )

    def ingest(
        self,
        *,
        content: bytes,
        db: Session,
        filename: str | None = None,
        team_name: str | None = None,
    ) -> TimesheetImportResult:
        """
        Import one file and replace every stored entry with its rows.

        Args:
            content:    Raw uploaded bytes (xlsx or delimited text).
            db:         Active SQLAlchemy session (caller owns lifecycle).
            filename:   Original file name, used in logs and errors.
            team_name:  When given, overrides the team of every imported row.
        """

        entries, summary = self.stage(content=content, filename=filename, team_name=team_name)
        TimesheetEntryRepository(db).replace_all(entries)

        return TimesheetImportResult(
            entries=entries,
            averages=self._aggregation_service.averages(entries),
            summary=summary,
        )

    def stage(
        self,
        *,
        content: bytes,
        filename: str | None = None,
        team_name: str | None = None,
    ) -> tuple[list[CanonicalEntry], IngestionSummary]:
        """
        Build the full batch in memory with metrics attached; no storage access.

        Reports batch_started and batch_completed to the observer.
        """

        source = filename or "<upload>"
        table = self._reader.read(content, filename)
        self._check_headers(table)
        self._observer.batch_started(source=source, row_count=len(table.rows))

        captured_errors: list[RowValidationError] = []
        entries: list[CanonicalEntry] = []
        rows_skipped = 0
        override_team = (team_name or "").strip() or None

        for row_number, raw_row in table.raw_rows():
            normalized = self._normalizer.normalize_row(raw_row)
            entry, row_errors = self._row_parser.parse_row(
                normalized_row=normalized,
                row_number=row_number,
            )
            for error in row_errors:
                self._record_error(captured_errors, error)

            if entry.is_empty():
                rows_skipped += 1
                self._record_error(
                    captured_errors,
                    RowValidationError(
                        row_number=row_number,
                        message="Row has no recognized timesheet values.",
                    ),
                )
                continue

            if override_team is not None:
                entry = replace(entry, team_name=override_team)
            entries.append(self.with_metrics(entry))

        summary = IngestionSummary(
            source=source,
            rows_read=len(table.rows),
            rows_imported=len(entries),
            rows_skipped=rows_skipped,
            validation_errors=captured_errors,
        )
        self._observer.batch_completed(summary)
        return entries, summary

    def recalculate(self, *, db: Session) -> TimesheetImportResult | None:
        """
        Recompute cached metrics from stored fields; ``None`` when the store is empty.
        """

        repository = TimesheetEntryRepository(db)
        stored = repository.list_all()
        if not stored:
            return None

        refreshed = [self.with_metrics(entry) for entry in stored]
        repository.save_metrics([entry.metrics for entry in refreshed if entry.metrics is not None])
        logger.info("Recalculated metrics for %d timesheet entr(ies)", len(refreshed))

        summary = IngestionSummary(
            source="<stored>",
            rows_read=len(stored),
            rows_imported=len(refreshed),
            rows_skipped=0,
        )
        return TimesheetImportResult(
            entries=refreshed,
            averages=self._aggregation_service.averages(refreshed),
            summary=summary,
        )

    def with_metrics(self, entry: CanonicalEntry) -> CanonicalEntry:
        metrics = self._metric_service.compute(replace(entry, metrics=None))
        metrics = replace(metrics, story_point_accuracy=round(metrics.story_point_accuracy, 2))
        return replace(entry, metrics=metrics)

    # ------------------------------------------------------------------
    # Ingestion internals
    # ------------------------------------------------------------------

    def _check_headers(self, table: SpreadsheetTable) -> None:
        recognized = self._normalizer.recognized_fields(table.headers)
        if not recognized:
            raise TimesheetHeaderValidationError(
                f"Header row {table.start_offset + 1} contains no recognized timesheet columns.",
                headers=table.headers,
            )
        logger.debug("Recognized timesheet columns: %s", recognized)

    def _record_error(
        self,
        captured_errors: list[RowValidationError],
        error: RowValidationError,
    ) -> None:
        self._observer.row_failed(error)
        if len(captured_errors) < self._max_validation_errors:
            captured_errors.append(error)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_timesheet_ingestion_service() -> TimesheetIngestionService:
    """
    Build and cache the import service with env-driven settings.
    """
    settings = get_timesheet_ingestion_settings()
    report_settings = get_timesheet_report_settings()
    return TimesheetIngestionService(
        header_row_offset=settings.header_row_offset,
        max_validation_errors=settings.max_validation_errors,
        observer=LoggingIngestionObserver(log_row_failures=settings.log_validation_errors),
        normalizer=FieldNormalizer(work_item_base_url=report_settings.work_item_base_url),
    )
