"""
tests/test_metric_service.py

Pytest unit tests for TimesheetMetricService.

Pure Python, no database. 2024-01-01 and 2025-06-30 are Mondays.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from app.domain.timesheet import CanonicalEntry, InvalidTimesheetInputError, MetricSet
from app.services.metric_service import FORMULA_DESCRIPTIONS, TimesheetMetricService


@pytest.fixture()
def svc() -> TimesheetMetricService:
    return TimesheetMetricService()


def _entry(**overrides: object) -> CanonicalEntry:
    values: dict[str, object] = {"item_id": "T1", "log_owner": "Alice"}
    values.update(overrides)
    return CanonicalEntry(**values)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Date metrics
# ---------------------------------------------------------------------------


class TestDateMetrics:
    def test_lead_time(self, svc: TimesheetMetricService) -> None:
        entry = _entry(requested_date=datetime(2025, 7, 1), actual_release_date=datetime(2025, 7, 7))
        assert svc.lead_time(entry) == 5

    def test_lead_time_falls_back_to_release_date(self, svc: TimesheetMetricService) -> None:
        entry = _entry(requested_date=datetime(2025, 7, 1), release_date=datetime(2025, 7, 2))
        assert svc.lead_time(entry) == 2

    def test_cycle_time_uses_start_date_fallback(self, svc: TimesheetMetricService) -> None:
        entry = _entry(start_date=datetime(2025, 7, 3), actual_release_date=datetime(2025, 7, 7))
        assert svc.cycle_time(entry) == 3

    def test_missing_dates_give_zero(self, svc: TimesheetMetricService) -> None:
        entry = _entry(requested_date=datetime(2025, 7, 1))
        assert svc.lead_time(entry) == 0
        assert svc.cycle_time(entry) == 0
        assert svc.release_delay(entry) == 0

    def test_release_delay_late_is_positive(self, svc: TimesheetMetricService) -> None:
        entry = _entry(
            expected_release_date=datetime(2024, 1, 1),
            actual_release_date=datetime(2024, 1, 3),
        )
        assert svc.release_delay(entry) == 3

    def test_release_delay_early_is_negative(self, svc: TimesheetMetricService) -> None:
        entry = _entry(
            expected_release_date=datetime(2024, 1, 3),
            actual_release_date=datetime(2024, 1, 1),
        )
        assert svc.release_delay(entry) == -3

    def test_release_delay_same_day(self, svc: TimesheetMetricService) -> None:
        entry = _entry(
            expected_release_date=datetime(2024, 1, 3, 18, 0),
            actual_release_date=datetime(2024, 1, 3, 9, 0),
        )
        assert svc.release_delay(entry) == 1

    def test_date_values_without_time(self, svc: TimesheetMetricService) -> None:
        entry = _entry(
            requested_date=date(2024, 1, 1),
            expected_release_date=date(2024, 1, 1),
            actual_release_date=date(2024, 1, 3),
        )
        assert svc.release_delay(entry) == 3
        assert svc.lead_time(entry) == 3
        assert svc.release_delay(_entry(expected_release_date=date(2024, 1, 3), release_date=date(2024, 1, 1))) == -3


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassification:
    @pytest.mark.parametrize(
        ("reported_by", "item_type", "expected"),
        [
            ("Planned", "Bug", 1),
            ("Planned", "Production Defect", 1),
            ("Planned", "Hotfix", 1),
            ("Planned", "Story", 0),
            ("Planned", "offhour", 0),
            ("QA", "Story", 0),
            ("QA", "bug", 1),
            (None, "Task", 0),
            (None, None, 0),
        ],
    )
    def test_defects_density(
        self,
        svc: TimesheetMetricService,
        reported_by: str | None,
        item_type: str | None,
        expected: int,
    ) -> None:
        assert svc.defects_density(_entry(reported_by=reported_by, item_type=item_type)) == expected

    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ({"log_type": "Off Hour", "item_type": "Bug"}, "Off Hour"),
            ({"reported_by": "Planned", "item_type": "Bug"}, "Bug"),
            ({"item_type": "Production Defect"}, "Defect"),
            ({"item_type": "Hot Fix"}, "Hotfix"),
            ({"reported_by": "Planned", "item_type": "Story"}, "Planned"),
            ({"reported_by": "Client", "item_type": "User Story"}, "New Request"),
            ({"item_type": "task"}, "New Request"),
            ({"item_type": "enhancement"}, "Enhancement"),
            ({}, "Unknown"),
        ],
    )
    def test_export_item_type(
        self,
        svc: TimesheetMetricService,
        fields: dict[str, str],
        expected: str,
    ) -> None:
        assert svc.export_item_type(_entry(**fields)) == expected


# ---------------------------------------------------------------------------
# Effort metrics
# ---------------------------------------------------------------------------


class TestEffortMetrics:
    def test_four_hours_is_one_point(self, svc: TimesheetMetricService) -> None:
        weekly = svc.weekly_points([_entry(log_hours_decimal=4.0)])

        assert len(weekly) == 1
        assert weekly[0].total_hours == pytest.approx(4.0)
        assert weekly[0].weekly_points == pytest.approx(1.0)

    def test_weekly_points_is_a_list_per_group(self, svc: TimesheetMetricService) -> None:
        weekly = svc.weekly_points(
            [
                _entry(log_hours_decimal=2.0),
                _entry(log_hours_decimal=3.0),
                _entry(log_owner="Bob", log_hours_decimal=8.0),
            ]
        )

        assert [(group.log_owner, group.weekly_points) for group in weekly] == [
            ("Alice", pytest.approx(1.25)),
            ("Bob", pytest.approx(2.0)),
        ]

    def test_story_point_accuracy(self, svc: TimesheetMetricService) -> None:
        entries = [_entry(estimated_points=5.0, log_hours_decimal=40.0)]
        assert svc.story_point_accuracy(entries) == pytest.approx(50.0)

    def test_zero_weekly_points_group_is_excluded(self, svc: TimesheetMetricService) -> None:
        entries = [
            _entry(estimated_points=5.0, log_hours_decimal=40.0),
            _entry(item_id="T2", estimated_points=3.0, log_hours_decimal=0.0),
        ]
        assert svc.story_point_accuracy(entries) == pytest.approx(50.0)

    def test_no_qualifying_group_is_zero(self, svc: TimesheetMetricService) -> None:
        assert svc.story_point_accuracy([_entry(log_hours_decimal=4.0)]) == 0.0

    def test_custom_minutes_per_point(self) -> None:
        svc = TimesheetMetricService(minutes_per_point=60)
        assert svc.weekly_points([_entry(log_hours_decimal=2.0)])[0].weekly_points == pytest.approx(2.0)

    def test_minutes_per_point_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            TimesheetMetricService(minutes_per_point=0)


# ---------------------------------------------------------------------------
# compute()
# ---------------------------------------------------------------------------


class TestCompute:
    def test_single_entry(self, svc: TimesheetMetricService) -> None:
        metrics = svc.compute(
            _entry(
                item_type="Bug",
                requested_date=datetime(2025, 7, 1),
                start_date=datetime(2025, 7, 2),
                actual_release_date=datetime(2025, 7, 7),
                expected_release_date=datetime(2025, 7, 4),
                estimated_points=1.0,
                log_hours_decimal=2.0,
            )
        )

        assert metrics.lead_time == 5
        assert metrics.cycle_time == 4
        assert metrics.defects_density == 1
        assert metrics.total_weekly_points == pytest.approx(0.5)
        assert metrics.story_point_accuracy == pytest.approx(200.0)
        assert metrics.release_delay == 2

    def test_group_uses_first_entry_for_dates(self, svc: TimesheetMetricService) -> None:
        metrics = svc.compute(
            [
                _entry(requested_date=datetime(2025, 6, 30), actual_release_date=datetime(2025, 7, 1), log_hours_decimal=2.0),
                _entry(requested_date=datetime(2025, 6, 2), actual_release_date=datetime(2025, 7, 1), log_hours_decimal=3.0),
            ]
        )

        assert metrics.lead_time == 2
        assert metrics.total_weekly_points == pytest.approx(1.25)

    def test_empty_entry_is_all_zero(self, svc: TimesheetMetricService) -> None:
        assert svc.compute(CanonicalEntry()) == MetricSet(
            weekly_points=svc.weekly_points([CanonicalEntry()])
        )

    def test_empty_group(self, svc: TimesheetMetricService) -> None:
        assert svc.compute([]) == MetricSet()

    @pytest.mark.parametrize("bad_input", [None, "T1", {"item_id": "T1"}, [{"item_id": "T1"}]])
    def test_structurally_invalid_input_raises(self, svc: TimesheetMetricService, bad_input: object) -> None:
        with pytest.raises(InvalidTimesheetInputError):
            svc.compute(bad_input)  # type: ignore[arg-type]

    def test_compute_is_deterministic(self, svc: TimesheetMetricService) -> None:
        entry = _entry(requested_date=datetime(2025, 7, 1), actual_release_date=datetime(2025, 7, 7), log_hours_decimal=6.0)
        assert svc.compute(entry) == svc.compute(entry)


def test_formula_descriptions_cover_every_metric() -> None:
    assert set(FORMULA_DESCRIPTIONS) == {
        "lead_time",
        "cycle_time",
        "defects_density",
        "weekly_points",
        "story_point_accuracy",
        "release_delay",
    }
