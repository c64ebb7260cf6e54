"""
tests/test_report_export_service.py

Workbook layout and styling of the weekly production report.
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO

import openpyxl
import pytest

from app.domain.timesheet import CanonicalEntry
from app.services.report_composer import ReportComposer, TimesheetReport
from app.services.report_export_service import (
    DEFAULT_ITEM_COLOR,
    HEADER_FILL,
    ITEM_TYPE_COLUMN,
    MEMBER_COLUMNS,
    REPORT_COLUMNS,
    TimesheetWorkbookExporter,
    format_report_date,
    item_type_color,
)


@pytest.fixture()
def exporter() -> TimesheetWorkbookExporter:
    return TimesheetWorkbookExporter(title="Weekly Production Report", filename_prefix="Weekly_Prod_List")


@pytest.fixture()
def report() -> TimesheetReport:
    entries = [
        CanonicalEntry(
            item_id="B7",
            log_owner="Bob",
            epic="Payments",
            item_name="Crash fix",
            item_type="Bug",
            log_hours_decimal=4.0,
            estimated_points=2.0,
            requested_date=datetime(2025, 7, 1),
            actual_release_date=datetime(2025, 7, 3),
            zoho_link="https://projects.zoho.com/portal/item/B7",
        ),
        CanonicalEntry(
            item_id="T2",
            log_owner="Alice",
            item_name="Search",
            item_type="Story",
            status="In Progress",
            log_hours_decimal=2.0,
        ),
    ]
    return ReportComposer().compose(entries, availability=90.0)


class TestHelpers:
    def test_format_report_date(self) -> None:
        assert format_report_date(datetime(2025, 1, 3)) == "Jan 3"
        assert format_report_date(None) == ""

    def test_item_type_color(self) -> None:
        assert item_type_color("Bug") == "FFFF9999"
        assert item_type_color(" new request ") == "FF99FF99"
        assert item_type_color("Something else") == DEFAULT_ITEM_COLOR

    def test_build_filename(self, exporter: TimesheetWorkbookExporter) -> None:
        assert exporter.build_filename(datetime(2025, 7, 7, 9, 30, 0)) == "Weekly_Prod_List_2025-07-07_093000.xlsx"


class TestLayout:
    def test_section_rows(self, exporter: TimesheetWorkbookExporter, report: TimesheetReport) -> None:
        layout = exporter.build_layout(report)
        rows = layout.rows

        assert rows[0] == ["Total Team members count:", 2]
        assert rows[2][0] == "Total available team: 90.0%"
        assert layout.summary_row == 6
        assert layout.header_row == 7
        assert rows[layout.header_row - 1] == list(REPORT_COLUMNS)
        assert rows[layout.totals_row - 1][0] == "TOTALS/AVERAGES"
        assert rows[layout.in_progress_banner_row - 1][0] == "In progress"
        assert rows[layout.member_banner_row - 1][0] == "Member-wise Calculation"
        assert rows[layout.member_header_row - 1] == list(MEMBER_COLUMNS)
        assert rows[layout.final_row - 1][0] == "Total team members"
        assert layout.final_row == len(rows)

    def test_completed_item_row(self, exporter: TimesheetWorkbookExporter, report: TimesheetReport) -> None:
        layout = exporter.build_layout(report)
        row = layout.rows[layout.header_row]

        assert row[0] == "Payments"
        assert row[1] == "Crash fix"
        assert row[3] == "Bug"
        assert row[4] == "Bob"
        assert row[5] == "Jul 1"
        assert row[9] == "Jul 3"
        assert row[10] == 3
        assert row[12] == 1
        assert row[15] == pytest.approx(1.0)
        assert row[16] == pytest.approx(200.0)
        assert row[18] == "https://projects.zoho.com/portal/item/B7"
        assert layout.item_rows[layout.header_row + 1] == "Bug"

    def test_in_progress_rows_follow_banner(self, exporter: TimesheetWorkbookExporter, report: TimesheetReport) -> None:
        layout = exporter.build_layout(report)
        row = layout.rows[layout.in_progress_banner_row]

        assert row[1] == "Search"
        assert row[3] == "New Request"

    def test_member_rows(self, exporter: TimesheetWorkbookExporter, report: TimesheetReport) -> None:
        layout = exporter.build_layout(report)
        members = layout.rows[layout.member_header_row : layout.final_row - 1]

        assert [member[0] for member in members] == ["Bob", "Alice"]
        assert members[0][MEMBER_COLUMNS.index("Capacity")] == pytest.approx(10.0)


class TestRender:
    def test_render_produces_styled_workbook(self, exporter: TimesheetWorkbookExporter, report: TimesheetReport) -> None:
        content = exporter.render(report)
        wb = openpyxl.load_workbook(BytesIO(content))
        ws = wb.active
        layout = exporter.build_layout(report)

        assert ws.title == "Weekly Production Report"
        assert ws.cell(layout.header_row, 1).value == "APPLICATION"
        assert ws.cell(layout.header_row, 1).fill.start_color.rgb == HEADER_FILL
        assert ws.cell(layout.header_row, 1).font.bold
        assert ws.cell(layout.header_row + 1, 2).value == "Crash fix"
        assert ws.cell(layout.header_row + 1, ITEM_TYPE_COLUMN).fill.start_color.rgb == "FFFF9999"
        assert ws.column_dimensions["B"].width == 40
