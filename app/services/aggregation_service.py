"""
app/services/aggregation_service.py

Team- and member-level rollups over computed timesheet metrics.

Entries that already carry cached metrics are used as-is; the rest are
computed on the fly through ``TimesheetMetricService``. Every summary is a
plain dict whose keys are always present: an empty input yields zeros,
never ``None`` or a missing key.

Averages are arithmetic means over every entry (a ``0`` metric is a data
point, not a gap) rounded to 2 decimals.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import numpy as np

from app.config import CAPACITY_MULTIPLIER, DEFAULT_TEAM_AVAILABILITY_PERCENT
from app.domain.timesheet import CanonicalEntry, MetricSet, require_entries
from app.services.metric_service import TimesheetMetricService

logger = logging.getLogger(__name__)

AVERAGE_KEYS: tuple[str, ...] = (
    "total_estimated_points",
    "total_actual_points",
    "total_weekly_points",
    "average_lead_time",
    "average_cycle_time",
    "average_defects_density",
    "average_story_point_accuracy",
    "average_release_delay",
)

LEAVE_KEYS: tuple[str, ...] = ("planned_leave", "unplanned_leave", "leave_count")


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(float(np.mean(values)), 2)


class TimesheetAggregationService:
    """
    Computes averages, member-wise and team-wide statistics.
    """

    def __init__(
        self,
        *,
        metric_service: TimesheetMetricService | None = None,
        capacity_multiplier: float = CAPACITY_MULTIPLIER,
        default_availability: float = DEFAULT_TEAM_AVAILABILITY_PERCENT,
    ) -> None:
        self._metric_service = metric_service or TimesheetMetricService()
        self._capacity_multiplier = capacity_multiplier
        self._default_availability = default_availability

    def empty_averages(self) -> dict[str, float]:
        return {key: 0 for key in AVERAGE_KEYS}

    def metrics_for(self, entry: CanonicalEntry) -> MetricSet:
        if entry.metrics is not None:
            return entry.metrics
        return self._metric_service.compute(entry)

    def averages(self, entries: Iterable[CanonicalEntry]) -> dict[str, float]:
        """
        Totals and averages over a set of entries.

        ``total_actual_points`` and ``total_weekly_points`` both flatten each
        entry's ``weekly_points`` list before summing.
        """

        items = require_entries(entries, component="TimesheetAggregationService.averages")
        if not items:
            return self.empty_averages()

        metrics = [self.metrics_for(entry) for entry in items]
        total_weekly = sum(metric.total_weekly_points for metric in metrics)

        return {
            "total_estimated_points": sum((entry.estimated_points or 0.0) for entry in items),
            "total_actual_points": total_weekly,
            "total_weekly_points": total_weekly,
            "average_lead_time": _mean([metric.lead_time for metric in metrics]),
            "average_cycle_time": _mean([metric.cycle_time for metric in metrics]),
            "average_defects_density": _mean([float(metric.defects_density) for metric in metrics]),
            "average_story_point_accuracy": _mean([metric.story_point_accuracy for metric in metrics]),
            "average_release_delay": _mean([metric.release_delay for metric in metrics]),
        }

    def member_stats(self, entries: Iterable[CanonicalEntry]) -> dict[str, dict[str, Any]]:
        """
        Per-owner averages plus entry count, capacity and leave placeholders.

        Entries without a ``log_owner`` belong to no member. Owners keep
        first-seen order.
        """

        items = require_entries(entries, component="TimesheetAggregationService.member_stats")
        partitions: dict[str, list[CanonicalEntry]] = {}
        for entry in items:
            if not entry.log_owner:
                continue
            partitions.setdefault(entry.log_owner, []).append(entry)

        stats: dict[str, dict[str, Any]] = {}
        for owner, owner_entries in partitions.items():
            owner_averages = self.averages(owner_entries)
            stats[owner] = {
                "entry_count": len(owner_entries),
                **owner_averages,
                "capacity": owner_averages["total_weekly_points"] * self._capacity_multiplier,
                **{key: 0 for key in LEAVE_KEYS},
            }

        logger.debug("Computed member stats for %d member(s)", len(stats))
        return stats

    def team_stats(
        self,
        entries: Iterable[CanonicalEntry],
        availability: float | None = None,
    ) -> dict[str, Any]:
        """
        Team-wide summary. ``availability`` is supplied externally, never derived.
        """

        items = require_entries(entries, component="TimesheetAggregationService.team_stats")
        team_averages = self.averages(items)
        members = {entry.log_owner for entry in items if entry.log_owner}

        return {
            "total_members": len(members),
            "availability": self._default_availability if availability is None else availability,
            "total_points": team_averages["total_weekly_points"],
            "total_estimated_points": team_averages["total_estimated_points"],
            "total_actual_points": team_averages["total_actual_points"],
            "average_story_point_accuracy": team_averages["average_story_point_accuracy"],
        }
