"""
app/domain/timesheet.py

Domain models shared by the timesheet import, metric and report flows.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

IDENTITY_FIELDS: tuple[str, ...] = ("item_id", "log_owner", "team_name")

TEXT_FIELDS: tuple[str, ...] = (
    "item_id",
    "log_owner",
    "team_name",
    "item_name",
    "item_detail",
    "epic",
    "item_type",
    "reported_by",
    "log_type",
    "remarks",
    "zoho_link",
    "status",
    "application",
    "project_name",
    "sprint",
    "priority",
)

DECIMAL_FIELDS: tuple[str, ...] = (
    "log_hours_decimal",
    "estimated_points",
    "actual_points",
)

DATE_FIELDS: tuple[str, ...] = (
    "log_date",
    "requested_date",
    "expected_start_date",
    "expected_release_date",
    "actual_start_date",
    "actual_release_date",
    "start_date",
    "release_date",
    "completed_on",
)

CANONICAL_FIELDS: tuple[str, ...] = TEXT_FIELDS + DECIMAL_FIELDS + DATE_FIELDS


class InvalidTimesheetInputError(ValueError):
    """
    Raised when a core component receives structurally invalid input.
    """

    def __init__(self, *, component: str, argument: str, received: Any) -> None:
        super().__init__(
            f"{component}: '{argument}' must be a collection of timesheet entries, "
            f"got {type(received).__name__}."
        )
        self.component = component
        self.argument = argument


def require_entries(entries: Any, *, component: str, argument: str = "entries") -> list[Any]:
    """
    Materialize an entry collection or fail loudly on ``None``/scalars.
    """

    if entries is None or isinstance(entries, (str, bytes, dict)) or not isinstance(entries, Iterable):
        raise InvalidTimesheetInputError(component=component, argument=argument, received=entries)
    return list(entries)


@dataclass(frozen=True)
class WeeklyPoints:
    """
    Effort logged against one (item, owner) pair converted to points.
    """

    item_id: str | None
    log_owner: str | None
    total_hours: float
    weekly_points: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "log_owner": self.log_owner,
            "total_hours": self.total_hours,
            "weekly_points": self.weekly_points,
        }


@dataclass(frozen=True)
class MetricSet:
    """
    The six per-entry productivity metrics.

    ``weekly_points`` is a list, not a scalar: use ``total_weekly_points``
    for the numeric total.
    """

    lead_time: float = 0.0
    cycle_time: float = 0.0
    defects_density: int = 0
    weekly_points: tuple[WeeklyPoints, ...] = ()
    story_point_accuracy: float = 0.0
    release_delay: float = 0.0

    @property
    def total_weekly_points(self) -> float:
        return sum(group.weekly_points for group in self.weekly_points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "lead_time": self.lead_time,
            "cycle_time": self.cycle_time,
            "defects_density": self.defects_density,
            "weekly_points": [group.to_dict() for group in self.weekly_points],
            "story_point_accuracy": self.story_point_accuracy,
            "release_delay": self.release_delay,
        }


@dataclass(frozen=True)
class CanonicalEntry:
    """
    One timesheet log row after alias resolution, fallback and parsing.

    Every field is optional. ``metrics`` is populated once metrics have
    been computed and cached onto the entry.
    """

    item_id: str | None = None
    log_owner: str | None = None
    team_name: str | None = None
    item_name: str | None = None
    item_detail: str | None = None
    epic: str | None = None
    item_type: str | None = None
    reported_by: str | None = None
    log_type: str | None = None
    remarks: str | None = None
    zoho_link: str | None = None
    status: str | None = None
    application: str | None = None
    project_name: str | None = None
    sprint: str | None = None
    priority: str | None = None
    log_hours_decimal: float | None = None
    estimated_points: float | None = None
    actual_points: float | None = None
    log_date: datetime | None = None
    requested_date: datetime | None = None
    expected_start_date: datetime | None = None
    expected_release_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_release_date: datetime | None = None
    start_date: datetime | None = None
    release_date: datetime | None = None
    completed_on: datetime | None = None
    metrics: MetricSet | None = None

    def is_empty(self) -> bool:
        """
        True when no canonical field carries a value.
        """

        for name in CANONICAL_FIELDS:
            value = getattr(self, name)
            if name in DECIMAL_FIELDS:
                if value:
                    return False
            elif value is not None:
                return False
        return True

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for entry_field in fields(self):
            value = getattr(self, entry_field.name)
            if entry_field.name == "metrics":
                continue
            payload[entry_field.name] = value.isoformat() if isinstance(value, datetime) else value
        metrics = self.metrics.to_dict() if self.metrics is not None else MetricSet().to_dict()
        payload.update(metrics)
        return payload


@dataclass(frozen=True)
class RowValidationError:
    """
    One import row problem. Non-fatal problems keep the row.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run import summary.
    """

    source: str
    rows_read: int
    rows_imported: int
    rows_skipped: int
    validation_errors: list[RowValidationError] = field(default_factory=list)
