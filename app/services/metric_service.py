"""
app/services/metric_service.py

Deterministic per-entry productivity metrics.

The calculator works on already parsed ``CanonicalEntry`` values and never
raises for missing fields: a metric whose inputs are absent is ``0``.

Formulas
--------
Lead Time            = business_days(requested_date, actual_release_date ?? release_date)
Cycle Time           = business_days(actual_start_date ?? start_date,
                                     actual_release_date ?? release_date)
Defects Density      = 1 when item_type mentions bug / defect / hotfix, else 0
Weekly Points        = (sum of log_hours_decimal per (item, owner) * 60) / MINUTES_PER_POINT
Story Point Accuracy = mean over groups of (estimated_points / weekly_points) * 100
Release Delay        = +business_days(expected, actual) when late or on time,
                       -business_days(actual, expected) when early
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from app.config import MINUTES_PER_POINT
from app.domain.timesheet import (
    CanonicalEntry,
    InvalidTimesheetInputError,
    MetricSet,
    WeeklyPoints,
    require_entries,
)
from app.services.business_days import as_date, business_days
from app.services.entry_reconciler import group_entries

logger = logging.getLogger(__name__)

DEFECT_MARKERS: tuple[str, ...] = ("bug", "defect", "hotfix", "hot fix")
NEW_REQUEST_MARKERS: tuple[str, ...] = ("story", "task")
OFF_HOUR_MARKERS: tuple[str, ...] = ("off hour", "offhour", "off-hour")
PLANNED_MARKER = "planned"

FORMULA_DESCRIPTIONS: dict[str, str] = {
    "lead_time": (
        "Lead Time = business days (Mon-Fri, inclusive) from Requested Date "
        "to Actual Release Date (or Release Date); 0 when either is missing"
    ),
    "cycle_time": (
        "Cycle Time = business days (Mon-Fri, inclusive) from Actual Start Date "
        "(or Start Date) to Actual Release Date (or Release Date); 0 when either is missing"
    ),
    "defects_density": "Defects Density = 1 if item type is a bug, defect or hotfix, 0 otherwise",
    "weekly_points": (
        f"Weekly Points = (logged hours per item and owner * 60) / {MINUTES_PER_POINT}"
    ),
    "story_point_accuracy": (
        "Story Point Accuracy = (Estimated Points / Weekly Points) * 100, "
        "averaged over items where both are positive"
    ),
    "release_delay": (
        "Release Delay = signed business days between Expected Release Date and "
        "Actual Release Date (positive = late, negative = early)"
    ),
}


def _lower(value: str | None) -> str:
    return (value or "").strip().lower()


def _contains_any(text: str, markers: Sequence[str]) -> bool:
    return any(marker in text for marker in markers)


def _release_date(entry: CanonicalEntry) -> datetime | None:
    return entry.actual_release_date or entry.release_date


class TimesheetMetricService:
    """
    Stateless metric calculator for one entry or one group of entries.
    """

    def __init__(self, *, minutes_per_point: int = MINUTES_PER_POINT) -> None:
        if minutes_per_point <= 0:
            raise ValueError("minutes_per_point must be positive.")
        self._minutes_per_point = minutes_per_point

    def compute(self, entry_or_group: CanonicalEntry | Sequence[CanonicalEntry]) -> MetricSet:
        """
        Compute the six metrics.

        A sequence is treated as one group: date metrics and classification
        come from its first entry, effort metrics span every member.
        """

        if isinstance(entry_or_group, CanonicalEntry):
            entries = [entry_or_group]
        else:
            entries = require_entries(entry_or_group, component="TimesheetMetricService.compute")
            if not all(isinstance(entry, CanonicalEntry) for entry in entries):
                raise InvalidTimesheetInputError(
                    component="TimesheetMetricService.compute",
                    argument="entry_or_group",
                    received=entry_or_group,
                )
        if not entries:
            return MetricSet()

        representative = entries[0]
        weekly = self.weekly_points(entries)
        return MetricSet(
            lead_time=self.lead_time(representative),
            cycle_time=self.cycle_time(representative),
            defects_density=self.defects_density(representative),
            weekly_points=weekly,
            story_point_accuracy=self.story_point_accuracy(entries, weekly),
            release_delay=self.release_delay(representative),
        )

    # ------------------------------------------------------------------
    # Date metrics
    # ------------------------------------------------------------------

    def lead_time(self, entry: CanonicalEntry) -> float:
        released = _release_date(entry)
        if entry.requested_date is None or released is None:
            return 0.0
        return business_days(entry.requested_date, released)

    def cycle_time(self, entry: CanonicalEntry) -> float:
        started = entry.actual_start_date or entry.start_date
        released = _release_date(entry)
        if started is None or released is None:
            return 0.0
        return business_days(started, released)

    def release_delay(self, entry: CanonicalEntry) -> float:
        expected = entry.expected_release_date
        actual = _release_date(entry)
        if expected is None or actual is None:
            return 0.0
        if as_date(actual) >= as_date(expected):
            return business_days(expected, actual)
        return -business_days(actual, expected)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def defects_density(self, entry: CanonicalEntry) -> int:
        """
        1 for defect-type work, 0 otherwise.

        Planned and unplanned work share the same rule: only bug, defect
        and hotfix item types count. Story, task and off-hour work never do.
        """

        item_type = _lower(entry.item_type)
        return 1 if _contains_any(item_type, DEFECT_MARKERS) else 0

    def export_item_type(self, entry: CanonicalEntry) -> str:
        """
        Display label used for report sections and row colouring.
        """

        log_type = _lower(entry.log_type)
        if _contains_any(log_type, OFF_HOUR_MARKERS):
            return "Off Hour"

        item_type = _lower(entry.item_type)
        if "bug" in item_type:
            return "Bug"
        if "defect" in item_type:
            return "Defect"
        if "hotfix" in item_type or "hot fix" in item_type:
            return "Hotfix"

        if PLANNED_MARKER in _lower(entry.reported_by):
            return "Planned"
        if _contains_any(item_type, NEW_REQUEST_MARKERS):
            return "New Request"

        raw = (entry.item_type or "").strip()
        if not raw:
            return "Unknown"
        return raw[:1].upper() + raw[1:]

    # ------------------------------------------------------------------
    # Effort metrics
    # ------------------------------------------------------------------

    def weekly_points(self, entries: Sequence[CanonicalEntry]) -> tuple[WeeklyPoints, ...]:
        """
        Sum logged hours per (item_id, log_owner) and convert to points.
        """

        result: list[WeeklyPoints] = []
        for members in group_entries(entries).values():
            total_hours = sum((member.log_hours_decimal or 0.0) for member in members)
            result.append(
                WeeklyPoints(
                    item_id=members[0].item_id,
                    log_owner=members[0].log_owner,
                    total_hours=total_hours,
                    weekly_points=(total_hours * 60) / self._minutes_per_point,
                )
            )
        return tuple(result)

    def story_point_accuracy(
        self,
        entries: Sequence[CanonicalEntry],
        weekly: Sequence[WeeklyPoints] | None = None,
    ) -> float:
        """
        Mean of ``estimated / weekly * 100`` over groups where both are positive.

        Groups with zero weekly points or no estimate are left out of the
        mean rather than counted as 0.
        """

        groups = group_entries(entries)
        weekly = self.weekly_points(entries) if weekly is None else weekly

        contributions: list[float] = []
        for (members, group_points) in zip(groups.values(), weekly):
            estimated = members[0].estimated_points or 0.0
            if estimated > 0 and group_points.weekly_points > 0:
                contributions.append((estimated / group_points.weekly_points) * 100)

        if not contributions:
            return 0.0
        return sum(contributions) / len(contributions)
