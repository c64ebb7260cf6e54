"""
db/models/timesheet_entry.py

One imported timesheet log row with its cached metric columns.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class TimesheetEntryRecord(TimestampMixin, Base):
    __tablename__ = "timesheet_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Row order within the imported file",
    )

    item_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    log_owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    team_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    item_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    item_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    epic: Mapped[str | None] = mapped_column(String(255), nullable=True)
    item_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reported_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    log_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    zoho_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str | None] = mapped_column(String(255), nullable=True)
    application: Mapped[str | None] = mapped_column(String(255), nullable=True)
    project_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sprint: Mapped[str | None] = mapped_column(String(255), nullable=True)
    priority: Mapped[str | None] = mapped_column(String(255), nullable=True)

    log_hours_decimal: Mapped[float | None] = mapped_column(Float, nullable=True, comment="Logged hours")
    estimated_points: Mapped[float | None] = mapped_column(Float, nullable=True)
    actual_points: Mapped[float | None] = mapped_column(Float, nullable=True)

    log_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    requested_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    expected_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    expected_release_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    actual_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    actual_release_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    release_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    completed_on: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    lead_time: Mapped[float | None] = mapped_column(Float, nullable=True, comment="Business days")
    cycle_time: Mapped[float | None] = mapped_column(Float, nullable=True, comment="Business days")
    defects_density: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weekly_points: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSON,
        nullable=True,
        comment="List of {item_id, log_owner, total_hours, weekly_points}",
    )
    story_point_accuracy: Mapped[float | None] = mapped_column(Float, nullable=True)
    release_delay: Mapped[float | None] = mapped_column(Float, nullable=True, comment="Signed business days")

    __table_args__ = (
        Index("ix_timesheet_entries_item_id", "item_id"),
        Index("ix_timesheet_entries_log_owner", "log_owner"),
        Index("ix_timesheet_entries_actual_release_date", "actual_release_date"),
        Index("ix_timesheet_entries_position", "position"),
    )
