"""
app/services/report_composer.py

Selects and orders the rows of the weekly production report.

Only row selection, grouping and ordering live here; the spreadsheet
layout and styling are in ``report_export_service``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Iterable

from app.config import get_timesheet_report_settings
from app.domain.timesheet import CanonicalEntry, MetricSet, require_entries
from app.services.aggregation_service import TimesheetAggregationService
from app.services.entry_reconciler import EntryReconciler
from app.services.metric_service import TimesheetMetricService

logger = logging.getLogger(__name__)

MEETING_TYPES: frozenset[str] = frozenset(
    {"meeting", "meetings", "daily stand-up", "standup", "stand-up"}
)
MEETING_NAME_MARKERS: tuple[str, ...] = ("standup", "stand-up", "meeting", "demo", "discussion")
IN_PROGRESS_STATUSES: frozenset[str] = frozenset({"inprogress", "on hold", "in progress"})
MEETING_LOG_TYPE = "meeting"


@dataclass(frozen=True)
class ReportRow:
    """
    One grouped work item as shown in a report section.
    """

    entry: CanonicalEntry
    export_item_type: str
    metrics: MetricSet
    is_meeting: bool = False

    @property
    def owner_label(self) -> str:
        return self.entry.log_owner or self.entry.team_name or ""

    @property
    def weekly_points(self) -> float:
        return self.metrics.total_weekly_points


@dataclass(frozen=True)
class TimesheetReport:
    """
    Composed report: section rows plus the three aggregate summaries.
    """

    completed_rows: list[ReportRow]
    in_progress_rows: list[ReportRow]
    averages: dict[str, float]
    team_stats: dict[str, Any]
    member_stats: dict[str, dict[str, Any]]
    week_start: date | None = None
    week_end: date | None = None
    generated_at: datetime = field(default_factory=datetime.now)


def _day(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


class ReportComposer:
    """
    Builds the completed / in-progress / member-wise report structure.
    """

    def __init__(
        self,
        *,
        metric_service: TimesheetMetricService | None = None,
        aggregation_service: TimesheetAggregationService | None = None,
        reconciler: EntryReconciler | None = None,
    ) -> None:
        self._metric_service = metric_service or TimesheetMetricService()
        self._aggregation_service = aggregation_service or TimesheetAggregationService(
            metric_service=self._metric_service
        )
        self._reconciler = reconciler or EntryReconciler()

    def compose(
        self,
        entries: Iterable[CanonicalEntry],
        *,
        week_start: date | datetime | None = None,
        week_end: date | datetime | None = None,
        availability: float | None = None,
    ) -> TimesheetReport:
        """
        Compose the report over ``entries``.

        The optional week window only decides which completed items are
        "this week's"; the aggregate summaries always cover every entry.
        """

        items = require_entries(entries, component="ReportComposer.compose")
        start_day = _day(week_start)
        end_day = _day(week_end)
        if start_day is not None and end_day is not None and end_day < start_day:
            raise ValueError("week_end must not be earlier than week_start.")

        completed = [entry for entry in items if self.is_completed(entry, start_day, end_day)]
        in_progress = [entry for entry in items if self.is_in_progress(entry, start_day, end_day)]

        completed_rows = self._build_rows(completed)
        regular = [row for row in completed_rows if not row.is_meeting]
        meetings = [row for row in completed_rows if row.is_meeting]

        report = TimesheetReport(
            completed_rows=regular + meetings,
            in_progress_rows=self._build_rows(in_progress),
            averages=self._aggregation_service.averages(items),
            team_stats=self._aggregation_service.team_stats(items, availability),
            member_stats=self._aggregation_service.member_stats(items),
            week_start=start_day,
            week_end=end_day,
        )
        logger.info(
            "Composed timesheet report entries=%d completed=%d in_progress=%d",
            len(items),
            len(report.completed_rows),
            len(report.in_progress_rows),
        )
        return report

    # ------------------------------------------------------------------
    # Section predicates
    # ------------------------------------------------------------------

    @staticmethod
    def _has_window(start_day: date | None, end_day: date | None) -> bool:
        return start_day is not None and end_day is not None

    def is_completed(
        self,
        entry: CanonicalEntry,
        start_day: date | None = None,
        end_day: date | None = None,
    ) -> bool:
        released = _day(entry.actual_release_date)
        if released is None:
            return False
        if self._has_window(start_day, end_day):
            return start_day <= released <= end_day
        return True

    def is_in_progress(
        self,
        entry: CanonicalEntry,
        start_day: date | None = None,
        end_day: date | None = None,
    ) -> bool:
        if (entry.log_type or "").strip().lower() == MEETING_LOG_TYPE:
            return False

        released = _day(entry.actual_release_date)
        if released is None:
            return True
        if self._has_window(start_day, end_day) and not start_day <= released <= end_day:
            return True
        return (entry.status or "").strip().lower() in IN_PROGRESS_STATUSES

    def is_meeting(self, entry: CanonicalEntry, export_item_type: str) -> bool:
        if export_item_type.strip().lower() in MEETING_TYPES:
            return True
        if (entry.item_type or "").strip().lower() in MEETING_TYPES:
            return True
        name = (entry.item_name or "").lower()
        return any(marker in name for marker in MEETING_NAME_MARKERS)

    # ------------------------------------------------------------------
    # Row construction
    # ------------------------------------------------------------------

    def _build_rows(self, entries: list[CanonicalEntry]) -> list[ReportRow]:
        rows: list[ReportRow] = []
        for grouped in self._reconciler.reconcile(entries):
            export_type = self._metric_service.export_item_type(grouped)
            rows.append(
                ReportRow(
                    entry=grouped,
                    export_item_type=export_type,
                    metrics=self._metric_service.compute(grouped),
                    is_meeting=self.is_meeting(grouped, export_type),
                )
            )
        return rows


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_report_composer() -> ReportComposer:
    """
    Build and cache the report composer with env-driven settings.
    """
    settings = get_timesheet_report_settings()
    metric_service = TimesheetMetricService()
    return ReportComposer(
        metric_service=metric_service,
        aggregation_service=TimesheetAggregationService(
            metric_service=metric_service,
            default_availability=settings.team_availability_percent,
        ),
    )
