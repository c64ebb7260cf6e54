"""
app/services/report_export_service.py

Renders a composed ``TimesheetReport`` as a styled Excel workbook.

Sheet layout
------------
Rows 1-4   team summary lines
Row 5      blank
Row 6      summary totals (20 columns, yellow)
Row 7      column headers (blue)
...        completed items (regular first, meetings after), coloured by item type
...        TOTALS/AVERAGES
...        "In progress" banner and in-progress items
...        "Member-wise Calculation" banner, header and one row per member
last       team totals (pale yellow)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from io import BytesIO
from typing import Any

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.config import get_timesheet_report_settings
from app.services.report_composer import ReportRow, TimesheetReport

logger = logging.getLogger(__name__)

REPORT_COLUMNS: tuple[str, ...] = (
    "APPLICATION",
    "ITEM NAME",
    "Item detail / Subtask",
    "ITEM TYPE",
    "TEAM NAME",
    "Requested Date",
    "Expected Start date",
    "Expected Release Date",
    "Actual Start Date",
    "Actual Release Date",
    "Lead Time",
    "Cycle Time",
    "Defects density",
    "Estimated Points",
    "Actual Points",
    "Weekly Points",
    "Story point Accuracy",
    "Remarks",
    "ZOHO LINK",
    "Release delay",
)

MEMBER_COLUMNS: tuple[str, ...] = (
    "Resource",
    "Planned Leave",
    "Unplanned Leave",
    "Leave Count",
    "Average Lead Time",
    "Average Cycle Time",
    "Average Defect Density",
    "Total Weekly Points",
    "Capacity",
    "Story point accuracy",
    "Average Release Delay",
)

ITEM_TYPE_COLUMN = REPORT_COLUMNS.index("ITEM TYPE") + 1

ITEM_TYPE_COLORS: dict[str, str] = {
    "BUG": "FFFF9999",
    "NEW REQUEST": "FF99FF99",
    "PLANNED": "FF99CCFF",
    "MEETING": "FFFFFF99",
    "MEETINGS": "FFFFFF99",
    "DAILY STAND-UP": "FFFFFF99",
    "TASK": "FFD1B3FF",
    "STORY": "FF99E6FF",
    "HOTFIX": "FFFFB366",
    "HOT FIX": "FFFFB366",
    "ENHANCEMENT": "FF99FFFF",
}
DEFAULT_ITEM_COLOR = "FFFFFFFF"

HEADER_FILL = "FF4472C4"
SUMMARY_FILL = "FFFFFF00"
IN_PROGRESS_FILL = "FFFFA500"
MEMBER_BANNER_FILL = "FF4F8A10"
MEMBER_HEADER_FILL = "FFE6F3FF"
FINAL_ROW_FILL = "FFFFFFCC"
WHITE = "FFFFFFFF"

_THIN = Side(style="thin", color="FFBFBFBF")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


def format_report_date(value: datetime | None) -> str:
    """
    ``Jan 3`` style month/day label, empty for missing dates.
    """

    if value is None:
        return ""
    return f"{value:%b} {value.day}"


def item_type_color(export_item_type: str) -> str:
    return ITEM_TYPE_COLORS.get(export_item_type.strip().upper(), DEFAULT_ITEM_COLOR)


@dataclass
class WorkbookLayout:
    """
    Sheet grid plus the 1-based row numbers that receive special styling.
    """

    rows: list[list[Any]] = field(default_factory=list)
    summary_row: int = 0
    header_row: int = 0
    item_rows: dict[int, str] = field(default_factory=dict)
    totals_row: int = 0
    in_progress_banner_row: int = 0
    member_banner_row: int = 0
    member_header_row: int = 0
    final_row: int = 0

    def append(self, values: list[Any]) -> int:
        self.rows.append(values)
        return len(self.rows)


class TimesheetWorkbookExporter:
    """
    Lays out and styles the weekly production report workbook.
    """

    def __init__(self, *, title: str | None = None, filename_prefix: str | None = None) -> None:
        settings = get_timesheet_report_settings()
        self._title = title or settings.report_title
        self._filename_prefix = filename_prefix or settings.report_filename_prefix

    def build_filename(self, now: datetime | None = None) -> str:
        stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H%M%S")
        return f"{self._filename_prefix}_{stamp}.xlsx"

    def build_layout(self, report: TimesheetReport) -> WorkbookLayout:
        layout = WorkbookLayout()
        averages = report.averages
        availability = report.team_stats.get("availability", 0)
        member_count = len(report.member_stats)
        blank_row = [""] * len(REPORT_COLUMNS)

        layout.append(["Total Team members count:", member_count])
        layout.append(["Capacity: based on team availability and effort est.", ""])
        layout.append([f"Total available team: {availability}%", ""])
        layout.append([f"Total points delivered: {averages['total_weekly_points']:.3f}", ""])
        layout.append([""])

        summary = list(blank_row)
        summary[10] = round(averages["average_lead_time"])
        summary[11] = round(averages["average_cycle_time"])
        summary[12] = round(averages["average_defects_density"], 2)
        summary[13] = round(averages["total_estimated_points"])
        summary[14] = round(averages["total_actual_points"], 2)
        summary[15] = round(averages["total_weekly_points"], 3)
        summary[16] = round(averages["average_story_point_accuracy"], 2)
        summary[19] = round(averages["average_release_delay"], 2)
        layout.summary_row = layout.append(summary)

        layout.header_row = layout.append(list(REPORT_COLUMNS))
        for row in report.completed_rows:
            layout.item_rows[layout.append(self._item_row(row))] = row.export_item_type

        totals = list(blank_row)
        totals[0] = "TOTALS/AVERAGES"
        totals[10] = round(averages["average_lead_time"], 2)
        totals[11] = round(averages["average_cycle_time"], 2)
        totals[12] = round(averages["average_defects_density"], 2)
        totals[13] = round(averages["total_estimated_points"])
        totals[14] = round(averages["total_actual_points"])
        totals[15] = round(averages["total_weekly_points"], 3)
        totals[16] = round(averages["average_story_point_accuracy"], 2)
        totals[19] = round(averages["average_release_delay"], 2)
        layout.totals_row = layout.append(totals)

        layout.append(list(blank_row))
        layout.append(list(blank_row))
        layout.in_progress_banner_row = layout.append(["In progress"] + [""] * (len(REPORT_COLUMNS) - 1))
        for row in report.in_progress_rows:
            layout.item_rows[layout.append(self._item_row(row))] = row.export_item_type

        layout.append(list(blank_row))
        layout.append(list(blank_row))
        layout.member_banner_row = layout.append(["Member-wise Calculation"] + [""] * (len(MEMBER_COLUMNS) - 1))
        layout.member_header_row = layout.append(list(MEMBER_COLUMNS))
        for member, stats in report.member_stats.items():
            layout.append(
                [
                    member,
                    stats.get("planned_leave", 0),
                    stats.get("unplanned_leave", 0),
                    stats.get("leave_count", 0),
                    round(stats.get("average_lead_time", 0), 2),
                    round(stats.get("average_cycle_time", 0), 2),
                    round(stats.get("average_defects_density", 0), 2),
                    round(stats.get("total_weekly_points", 0), 2),
                    round(stats.get("capacity", 0), 2),
                    round(stats.get("average_story_point_accuracy", 0), 2),
                    round(stats.get("average_release_delay", 0), 2),
                ]
            )

        layout.final_row = layout.append(
            [
                "Total team members",
                member_count,
                "",
                "",
                "",
                "Total weekly points",
                round(averages["total_weekly_points"], 3),
                "",
                "Team Availability",
                f"{availability}%",
                "",
            ]
        )
        return layout

    def build_rows(self, report: TimesheetReport) -> list[list[Any]]:
        return self.build_layout(report).rows

    def render(self, report: TimesheetReport) -> bytes:
        """
        Return the styled ``.xlsx`` file content.
        """

        layout = self.build_layout(report)
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = self._title[:31]

        for values in layout.rows:
            ws.append(values)

        self._style_sheet(ws, layout)

        output = BytesIO()
        wb.save(output)
        logger.info("Rendered timesheet workbook rows=%d", len(layout.rows))
        return output.getvalue()

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _item_row(row: ReportRow) -> list[Any]:
        entry = row.entry
        metrics = row.metrics
        return [
            entry.epic or "",
            entry.item_name or "",
            entry.item_detail or "",
            row.export_item_type,
            row.owner_label,
            format_report_date(entry.requested_date),
            format_report_date(entry.expected_start_date),
            format_report_date(entry.expected_release_date),
            format_report_date(entry.actual_start_date),
            format_report_date(entry.actual_release_date),
            metrics.lead_time,
            metrics.cycle_time,
            metrics.defects_density,
            entry.estimated_points or 0,
            entry.actual_points or 0,
            round(row.weekly_points, 2),
            round(metrics.story_point_accuracy, 2),
            entry.remarks or "",
            entry.zoho_link or "",
            metrics.release_delay,
        ]

    # ------------------------------------------------------------------
    # Styling
    # ------------------------------------------------------------------

    def _style_sheet(self, ws: Any, layout: WorkbookLayout) -> None:
        width = len(REPORT_COLUMNS)
        member_width = len(MEMBER_COLUMNS)

        for row in range(1, 5):
            ws.cell(row, 1).font = Font(bold=True)

        self._fill_row(ws, layout.summary_row, width, SUMMARY_FILL, font=Font(bold=True))
        self._fill_row(
            ws,
            layout.header_row,
            width,
            HEADER_FILL,
            font=Font(bold=True, color=WHITE),
            alignment=Alignment(horizontal="center", vertical="center", wrap_text=True),
        )

        for row, export_type in layout.item_rows.items():
            color = item_type_color(export_type)
            ws.cell(row, ITEM_TYPE_COLUMN).fill = PatternFill(
                start_color=color,
                end_color=color,
                fill_type="solid",
            )
            for column in range(1, width + 1):
                ws.cell(row, column).border = _BORDER

        self._fill_row(ws, layout.totals_row, width, SUMMARY_FILL, font=Font(bold=True))
        self._fill_row(ws, layout.in_progress_banner_row, width, IN_PROGRESS_FILL, font=Font(bold=True))
        self._fill_row(
            ws,
            layout.member_banner_row,
            member_width,
            MEMBER_BANNER_FILL,
            font=Font(bold=True, color=WHITE),
        )
        self._fill_row(ws, layout.member_header_row, member_width, MEMBER_HEADER_FILL, font=Font(bold=True))
        self._fill_row(ws, layout.final_row, member_width, FINAL_ROW_FILL, font=Font(bold=True))

        for column in range(1, width + 1):
            ws.column_dimensions[get_column_letter(column)].width = 18
        ws.column_dimensions["B"].width = 40
        ws.column_dimensions["C"].width = 40
        ws.column_dimensions["R"].width = 40
        ws.column_dimensions["S"].width = 50

    @staticmethod
    def _fill_row(
        ws: Any,
        row: int,
        width: int,
        color: str,
        *,
        font: Font | None = None,
        alignment: Alignment | None = None,
    ) -> None:
        if row <= 0:
            return
        for column in range(1, width + 1):
            cell = ws.cell(row, column)
            cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
            cell.border = _BORDER
            if font is not None:
                cell.font = font
            if alignment is not None:
                cell.alignment = alignment


@lru_cache(maxsize=1)
def get_workbook_exporter() -> TimesheetWorkbookExporter:
    return TimesheetWorkbookExporter()
