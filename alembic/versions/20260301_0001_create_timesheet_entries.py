"""create timesheet_entries table

Revision ID: 20260301_0001
Revises:
Create Date: 2026-03-01 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None

_TEXT_COLUMNS: tuple[tuple[str, sa.types.TypeEngine], ...] = (
    ("item_id", sa.String(length=255)),
    ("log_owner", sa.String(length=255)),
    ("team_name", sa.String(length=255)),
    ("item_name", sa.Text()),
    ("item_detail", sa.Text()),
    ("epic", sa.String(length=255)),
    ("item_type", sa.String(length=255)),
    ("reported_by", sa.String(length=255)),
    ("log_type", sa.String(length=255)),
    ("remarks", sa.Text()),
    ("zoho_link", sa.Text()),
    ("status", sa.String(length=255)),
    ("application", sa.String(length=255)),
    ("project_name", sa.String(length=255)),
    ("sprint", sa.String(length=255)),
    ("priority", sa.String(length=255)),
)

_DATE_COLUMNS: tuple[str, ...] = (
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


def upgrade() -> None:
    op.create_table(
        "timesheet_entries",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False,
                  comment="Row order within the imported file"),
        *[sa.Column(name, column_type, nullable=True) for name, column_type in _TEXT_COLUMNS],
        sa.Column("log_hours_decimal", sa.Float(), nullable=True, comment="Logged hours"),
        sa.Column("estimated_points", sa.Float(), nullable=True),
        sa.Column("actual_points", sa.Float(), nullable=True),
        *[sa.Column(name, sa.DateTime(timezone=False), nullable=True) for name in _DATE_COLUMNS],
        sa.Column("lead_time", sa.Float(), nullable=True, comment="Business days"),
        sa.Column("cycle_time", sa.Float(), nullable=True, comment="Business days"),
        sa.Column("defects_density", sa.Integer(), nullable=True),
        sa.Column(
            "weekly_points",
            sa.JSON(),
            nullable=True,
            comment="List of {item_id, log_owner, total_hours, weekly_points}",
        ),
        sa.Column("story_point_accuracy", sa.Float(), nullable=True),
        sa.Column("release_delay", sa.Float(), nullable=True, comment="Signed business days"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_timesheet_entries"),
    )
    op.create_index(
        "ix_timesheet_entries_item_id",
        "timesheet_entries",
        ["item_id"],
        unique=False,
    )
    op.create_index(
        "ix_timesheet_entries_log_owner",
        "timesheet_entries",
        ["log_owner"],
        unique=False,
    )
    op.create_index(
        "ix_timesheet_entries_actual_release_date",
        "timesheet_entries",
        ["actual_release_date"],
        unique=False,
    )
    op.create_index(
        "ix_timesheet_entries_position",
        "timesheet_entries",
        ["position"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_timesheet_entries_position", table_name="timesheet_entries")
    op.drop_index("ix_timesheet_entries_actual_release_date", table_name="timesheet_entries")
    op.drop_index("ix_timesheet_entries_log_owner", table_name="timesheet_entries")
    op.drop_index("ix_timesheet_entries_item_id", table_name="timesheet_entries")
    op.drop_table("timesheet_entries")
