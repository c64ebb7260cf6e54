"""
app/repositories/timesheet_entry_repository.py

Persistence layer for imported timesheet entries.

The store is replaced wholesale on every import: ``replace_all`` deletes
and inserts inside one transaction, so a failed import leaves the
previous data untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.timesheet import CANONICAL_FIELDS, CanonicalEntry, MetricSet, WeeklyPoints
from db.models.timesheet_entry import TimesheetEntryRecord

logger = logging.getLogger(__name__)


class TimesheetPersistenceError(RuntimeError):
    """
    Raised when timesheet entries cannot be written or removed.
    """


def _metric_columns(metrics: MetricSet | None) -> dict[str, Any]:
    if metrics is None:
        return {
            "lead_time": None,
            "cycle_time": None,
            "defects_density": None,
            "weekly_points": None,
            "story_point_accuracy": None,
            "release_delay": None,
        }
    return {
        "lead_time": metrics.lead_time,
        "cycle_time": metrics.cycle_time,
        "defects_density": metrics.defects_density,
        "weekly_points": [group.to_dict() for group in metrics.weekly_points],
        "story_point_accuracy": metrics.story_point_accuracy,
        "release_delay": metrics.release_delay,
    }


def _metrics_from_record(record: TimesheetEntryRecord) -> MetricSet | None:
    if record.weekly_points is None:
        return None
    return MetricSet(
        lead_time=record.lead_time or 0.0,
        cycle_time=record.cycle_time or 0.0,
        defects_density=record.defects_density or 0,
        weekly_points=tuple(
            WeeklyPoints(
                item_id=group.get("item_id"),
                log_owner=group.get("log_owner"),
                total_hours=float(group.get("total_hours") or 0.0),
                weekly_points=float(group.get("weekly_points") or 0.0),
            )
            for group in record.weekly_points
        ),
        story_point_accuracy=record.story_point_accuracy or 0.0,
        release_delay=record.release_delay or 0.0,
    )


def to_record(entry: CanonicalEntry, position: int) -> TimesheetEntryRecord:
    values = {name: getattr(entry, name) for name in CANONICAL_FIELDS}
    return TimesheetEntryRecord(position=position, **values, **_metric_columns(entry.metrics))


def to_entry(record: TimesheetEntryRecord) -> CanonicalEntry:
    values = {name: getattr(record, name) for name in CANONICAL_FIELDS}
    return CanonicalEntry(**values, metrics=_metrics_from_record(record))


class TimesheetEntryRepository:
    """
    Repository offering replace-all / read-all / delete-all of entries.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def replace_all(self, entries: Sequence[CanonicalEntry]) -> int:
        """
        Swap the stored entries for ``entries`` atomically.
        """

        records = [to_record(entry, position) for position, entry in enumerate(entries)]
        try:
            removed = self._session.execute(delete(TimesheetEntryRecord)).rowcount
            self._session.add_all(records)
            self._session.flush()
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise TimesheetPersistenceError("Failed to replace timesheet entries.") from exc

        logger.info("Replaced timesheet entries removed=%s inserted=%d", removed, len(records))
        return len(records)

    def list_all(self) -> list[CanonicalEntry]:
        return [to_entry(record) for record in self._ordered_records()]

    def count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(TimesheetEntryRecord)) or 0)

    def clear(self) -> int:
        try:
            removed = self._session.execute(delete(TimesheetEntryRecord)).rowcount
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise TimesheetPersistenceError("Failed to clear timesheet entries.") from exc

        logger.info("Cleared timesheet entries removed=%s", removed)
        return int(removed or 0)

    def save_metrics(self, metrics: Sequence[MetricSet]) -> int:
        """
        Write metric columns back, aligned with ``list_all()`` order.
        """

        try:
            records = self._ordered_records()
            if len(records) != len(metrics):
                raise ValueError(
                    f"Expected {len(records)} metric set(s), got {len(metrics)}."
                )
            for record, metric_set in zip(records, metrics):
                for column, value in _metric_columns(metric_set).items():
                    setattr(record, column, value)
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise TimesheetPersistenceError("Failed to save timesheet metrics.") from exc

        return len(records)

    def _ordered_records(self) -> list[TimesheetEntryRecord]:
        stmt = select(TimesheetEntryRecord).order_by(
            TimesheetEntryRecord.position,
            TimesheetEntryRecord.created_at,
        )
        return list(self._session.scalars(stmt).all())
