"""
app/logging_utils.py

Structured logging helpers and the import observer checkpoints.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from app.domain.timesheet import IngestionSummary, RowValidationError

logger = logging.getLogger(__name__)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


class IngestionObserver(Protocol):
    """
    Sink notified at the fixed checkpoints of one import batch.
    """

    def batch_started(self, *, source: str, row_count: int) -> None: ...

    def row_failed(self, error: RowValidationError) -> None: ...

    def batch_completed(self, summary: IngestionSummary) -> None: ...


class NullIngestionObserver:
    """
    Observer that ignores every checkpoint.
    """

    def batch_started(self, *, source: str, row_count: int) -> None:
        return None

    def row_failed(self, error: RowValidationError) -> None:
        return None

    def batch_completed(self, summary: IngestionSummary) -> None:
        return None


class LoggingIngestionObserver:
    """
    Default observer routing checkpoints to structured log lines.
    """

    def __init__(
        self,
        *,
        target: logging.Logger | None = None,
        log_row_failures: bool = True,
    ) -> None:
        self._logger = target or logger
        self._log_row_failures = log_row_failures

    def batch_started(self, *, source: str, row_count: int) -> None:
        log_event(self._logger, logging.INFO, "timesheet_import_started", source=source, row_count=row_count)

    def row_failed(self, error: RowValidationError) -> None:
        if not self._log_row_failures:
            return
        log_event(
            self._logger,
            logging.WARNING,
            "timesheet_row_failed",
            row_number=error.row_number,
            column=error.column,
            message=error.message,
            value=error.value,
        )

    def batch_completed(self, summary: IngestionSummary) -> None:
        log_event(
            self._logger,
            logging.INFO,
            "timesheet_import_completed",
            source=summary.source,
            rows_read=summary.rows_read,
            rows_imported=summary.rows_imported,
            rows_skipped=summary.rows_skipped,
            validation_errors=len(summary.validation_errors),
        )
