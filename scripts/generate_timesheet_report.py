"""
Build the weekly production workbook from a timesheet export, without a database.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from app.config import get_timesheet_ingestion_settings, get_timesheet_report_settings
from app.logging_utils import LoggingIngestionObserver
from app.mappers.field_normalizer import FieldNormalizer
from app.services.report_composer import get_report_composer
from app.services.report_export_service import get_workbook_exporter
from app.services.timesheet_ingestion_service import (
    SpreadsheetFormatError,
    TimesheetHeaderValidationError,
    TimesheetIngestionService,
)


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def main() -> int:
    ingestion_settings = get_timesheet_ingestion_settings()
    report_settings = get_timesheet_report_settings()

    parser = argparse.ArgumentParser(description="Generate the weekly production report workbook.")
    parser.add_argument("input", type=Path, help="Timesheet export (.xlsx or .csv).")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Destination .xlsx path. Defaults to a timestamped name in the current directory.",
    )
    parser.add_argument("--week-start", type=_parse_day, default=None, help="YYYY-MM-DD")
    parser.add_argument("--week-end", type=_parse_day, default=None, help="YYYY-MM-DD")
    parser.add_argument(
        "--availability",
        type=float,
        default=report_settings.team_availability_percent,
        help="Team availability percentage shown in the report.",
    )
    parser.add_argument(
        "--header-offset",
        type=int,
        default=ingestion_settings.header_row_offset,
        help="Number of rows above the header row.",
    )
    args = parser.parse_args()

    if (args.week_start is None) != (args.week_end is None):
        parser.error("--week-start and --week-end must be given together")

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )

    service = TimesheetIngestionService(
        header_row_offset=args.header_offset,
        max_validation_errors=ingestion_settings.max_validation_errors,
        observer=LoggingIngestionObserver(log_row_failures=ingestion_settings.log_validation_errors),
        normalizer=FieldNormalizer(work_item_base_url=report_settings.work_item_base_url),
    )

    try:
        entries, summary = service.stage(
            content=args.input.read_bytes(),
            filename=args.input.name,
            team_name=ingestion_settings.default_team_name,
        )
    except (SpreadsheetFormatError, TimesheetHeaderValidationError) as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 2

    try:
        report = get_report_composer().compose(
            entries,
            week_start=args.week_start,
            week_end=args.week_end,
            availability=args.availability,
        )
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    exporter = get_workbook_exporter()
    output = args.output or Path(exporter.build_filename(report.generated_at))
    output.write_bytes(exporter.render(report))

    payload = {
        "output": str(output),
        "rows_read": summary.rows_read,
        "rows_imported": summary.rows_imported,
        "rows_skipped": summary.rows_skipped,
        "averages": report.averages,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
