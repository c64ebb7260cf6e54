from __future__ import annotations

import unittest
from datetime import date, datetime, time, timedelta, timezone

from app.validators.value_parser import (
    TimesheetRowParser,
    is_blank,
    parse_date,
    parse_decimal,
    stringify_value,
)


class TestParseDate(unittest.TestCase):
    def test_day_month_year_with_time(self) -> None:
        self.assertEqual(parse_date("01/Jul/2025 08:23 PM"), datetime(2025, 7, 1, 20, 23))
        self.assertEqual(parse_date("12/Jul/2025 12:30 PM"), datetime(2025, 7, 12, 12, 30))
        self.assertEqual(parse_date("12/Jul/2025 12:05 am"), datetime(2025, 7, 12, 0, 5))

    def test_day_month_year_without_time(self) -> None:
        self.assertEqual(parse_date("3/Jan/2024"), datetime(2024, 1, 3))

    def test_range_keeps_start(self) -> None:
        self.assertEqual(
            parse_date("01/Jul/2025 12:00 AM - 05/Jul/2025 11:59 PM"),
            datetime(2025, 7, 1, 0, 0),
        )
        self.assertEqual(parse_date("01/Jul/2025 - 05/Jul/2025"), datetime(2025, 7, 1))

    def test_free_form_text(self) -> None:
        self.assertEqual(parse_date("2025-07-03"), datetime(2025, 7, 3))
        self.assertEqual(parse_date("July 3, 2025 10:15"), datetime(2025, 7, 3, 10, 15))

    def test_native_values(self) -> None:
        self.assertEqual(parse_date(date(2025, 7, 3)), datetime(2025, 7, 3))
        aware = datetime(2025, 7, 3, 9, 0, tzinfo=timezone.utc)
        self.assertEqual(parse_date(aware), datetime(2025, 7, 3, 9, 0))

    def test_unparseable_and_blank_are_none(self) -> None:
        self.assertIsNone(parse_date(None))
        self.assertIsNone(parse_date("   "))
        self.assertIsNone(parse_date("???"))
        self.assertIsNone(parse_date(45000))
        self.assertIsNone(parse_date("31/Feb/2025"))


class TestParseDecimal(unittest.TestCase):
    def test_blank_is_zero(self) -> None:
        self.assertEqual(parse_decimal(None), 0.0)
        self.assertEqual(parse_decimal(""), 0.0)
        self.assertEqual(parse_decimal(" "), 0.0)

    def test_formula_residue_is_zero(self) -> None:
        self.assertEqual(parse_decimal("=SUM(D2:D9)"), 0.0)

    def test_hours_minutes(self) -> None:
        self.assertAlmostEqual(parse_decimal("1:30"), 1.5)
        self.assertAlmostEqual(parse_decimal("0:45"), 0.75)
        self.assertAlmostEqual(parse_decimal(time(2, 15)), 2.25)
        self.assertAlmostEqual(parse_decimal(timedelta(minutes=90)), 1.5)

    def test_strips_non_numeric_characters(self) -> None:
        self.assertEqual(parse_decimal("2.5 hrs"), 2.5)
        self.assertEqual(parse_decimal("abc"), 0.0)
        self.assertEqual(parse_decimal("1.2.3"), 0.0)

    def test_numbers_pass_through(self) -> None:
        self.assertEqual(parse_decimal(3), 3.0)
        self.assertEqual(parse_decimal(0.25), 0.25)
        self.assertEqual(parse_decimal(True), 0.0)


class TestValueHelpers(unittest.TestCase):
    def test_is_blank(self) -> None:
        self.assertTrue(is_blank(None))
        self.assertTrue(is_blank(" \t"))
        self.assertFalse(is_blank(0))

    def test_stringify_value(self) -> None:
        self.assertEqual(stringify_value(101.0), "101")
        self.assertEqual(stringify_value(" x "), "x")
        self.assertEqual(stringify_value(1.5), "1.5")
        self.assertIsNone(stringify_value(""))


class TestTimesheetRowParser(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = TimesheetRowParser()

    def test_parses_typed_fields(self) -> None:
        entry, errors = self.parser.parse_row(
            normalized_row={
                "item_id": 7.0,
                "log_owner": " Alice ",
                "log_hours_decimal": "1:30",
                "estimated_points": "3",
                "requested_date": "01/Jul/2025",
            },
            row_number=9,
        )

        self.assertEqual(errors, [])
        self.assertEqual(entry.item_id, "7")
        self.assertEqual(entry.log_owner, "Alice")
        self.assertAlmostEqual(entry.log_hours_decimal, 1.5)
        self.assertEqual(entry.estimated_points, 3.0)
        self.assertEqual(entry.actual_points, 0.0)
        self.assertEqual(entry.requested_date, datetime(2025, 7, 1))
        self.assertIsNone(entry.metrics)

    def test_unparseable_date_is_reported_not_raised(self) -> None:
        entry, errors = self.parser.parse_row(
            normalized_row={"item_id": "T1", "requested_date": "???"},
            row_number=12,
        )

        self.assertIsNone(entry.requested_date)
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].row_number, 12)
        self.assertEqual(errors[0].column, "requested_date")
        self.assertEqual(errors[0].value, "???")


if __name__ == "__main__":
    unittest.main()
