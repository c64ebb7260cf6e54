"""
tests/test_report_composer.py

Section selection and ordering of the weekly report.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from app.domain.timesheet import CanonicalEntry
from app.services.report_composer import ReportComposer

WEEK_START = date(2025, 6, 30)
WEEK_END = date(2025, 7, 6)


@pytest.fixture()
def composer() -> ReportComposer:
    return ReportComposer()


@pytest.fixture()
def entries() -> list[CanonicalEntry]:
    return [
        CanonicalEntry(
            item_id="M1",
            log_owner="Alice",
            item_name="Daily standup",
            item_type="Meeting",
            log_type="Meeting",
            log_hours_decimal=0.25,
            actual_release_date=datetime(2025, 7, 2),
        ),
        CanonicalEntry(
            item_id="T1",
            log_owner="Alice",
            item_name="Login page",
            item_type="Story",
            status="Done",
            log_hours_decimal=2.0,
            actual_release_date=datetime(2025, 7, 3),
        ),
        CanonicalEntry(
            item_id="T1",
            log_owner="Alice",
            item_name="Login page",
            item_type="Story",
            status="Done",
            log_hours_decimal=3.0,
            actual_release_date=datetime(2025, 7, 3),
        ),
        CanonicalEntry(
            item_id="T2",
            log_owner="Bob",
            item_name="Search",
            item_type="Task",
            status="In Progress",
            log_hours_decimal=4.0,
        ),
        CanonicalEntry(
            item_id="T3",
            log_owner="Bob",
            item_name="Old export",
            item_type="Bug",
            status="Done",
            log_hours_decimal=1.0,
            actual_release_date=datetime(2025, 6, 20),
        ),
    ]


class TestCompose:
    def test_window_selects_completed_items(self, composer: ReportComposer, entries: list[CanonicalEntry]) -> None:
        report = composer.compose(entries, week_start=WEEK_START, week_end=WEEK_END)

        assert [row.entry.item_id for row in report.completed_rows] == ["T1", "M1"]
        assert report.completed_rows[-1].is_meeting
        assert [row.entry.item_id for row in report.in_progress_rows] == ["T2", "T3"]

    def test_completed_rows_are_reconciled(self, composer: ReportComposer, entries: list[CanonicalEntry]) -> None:
        report = composer.compose(entries, week_start=WEEK_START, week_end=WEEK_END)

        login = report.completed_rows[0]
        assert login.entry.log_hours_decimal == pytest.approx(5.0)
        assert login.weekly_points == pytest.approx(1.25)
        assert login.export_item_type == "New Request"
        assert login.owner_label == "Alice"

    def test_without_window_every_release_is_completed(
        self,
        composer: ReportComposer,
        entries: list[CanonicalEntry],
    ) -> None:
        report = composer.compose(entries)

        assert [row.entry.item_id for row in report.completed_rows] == ["T1", "T3", "M1"]
        assert [row.entry.item_id for row in report.in_progress_rows] == ["T2"]
        assert report.week_start is None

    def test_in_progress_status_with_release_date(self, composer: ReportComposer) -> None:
        entry = CanonicalEntry(item_id="T9", status="On Hold", actual_release_date=datetime(2025, 7, 1))
        report = composer.compose([entry])

        assert [row.entry.item_id for row in report.completed_rows] == ["T9"]
        assert [row.entry.item_id for row in report.in_progress_rows] == ["T9"]

    def test_meeting_log_type_never_in_progress(self, composer: ReportComposer) -> None:
        entry = CanonicalEntry(item_id="M2", log_type="meeting", status="In Progress")
        assert composer.compose([entry]).in_progress_rows == []

    def test_aggregates_cover_every_entry(self, composer: ReportComposer, entries: list[CanonicalEntry]) -> None:
        report = composer.compose(entries, week_start=WEEK_START, week_end=WEEK_END, availability=75.0)

        assert report.averages["total_weekly_points"] == pytest.approx((0.25 + 2 + 3 + 4 + 1) / 4)
        assert report.team_stats["availability"] == 75.0
        assert report.team_stats["total_members"] == 2
        assert list(report.member_stats) == ["Alice", "Bob"]

    def test_accepts_datetime_window(self, composer: ReportComposer, entries: list[CanonicalEntry]) -> None:
        report = composer.compose(
            entries,
            week_start=datetime(2025, 6, 30, 9, 0),
            week_end=datetime(2025, 7, 6, 9, 0),
        )
        assert report.week_end == WEEK_END

    def test_inverted_window_is_rejected(self, composer: ReportComposer, entries: list[CanonicalEntry]) -> None:
        with pytest.raises(ValueError):
            composer.compose(entries, week_start=WEEK_END, week_end=WEEK_START)

    def test_empty_input(self, composer: ReportComposer) -> None:
        report = composer.compose([])

        assert report.completed_rows == []
        assert report.in_progress_rows == []
        assert report.averages["total_weekly_points"] == 0
        assert report.member_stats == {}


class TestMeetingDetection:
    @pytest.mark.parametrize(
        ("entry", "export_type", "expected"),
        [
            (CanonicalEntry(item_type="Meeting"), "Meeting", True),
            (CanonicalEntry(item_type="Daily Stand-up"), "Daily stand-up", True),
            (CanonicalEntry(item_type="Task", item_name="Sprint demo"), "New Request", True),
            (CanonicalEntry(item_type="Task", item_name="Checkout"), "New Request", False),
        ],
    )
    def test_is_meeting(
        self,
        composer: ReportComposer,
        entry: CanonicalEntry,
        export_type: str,
        expected: bool,
    ) -> None:
        assert composer.is_meeting(entry, export_type) is expected
