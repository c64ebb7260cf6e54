"""
app/validators/value_parser.py

Date and decimal parsing for heterogeneous timesheet cell values.

Parsing never raises: unparseable dates become ``None`` and unparseable
numbers become ``0.0``. ``TimesheetRowParser`` reports the date cases
back to the caller as non-fatal row errors.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Mapping

from dateutil import parser as dateparser

from app.domain.timesheet import (
    DATE_FIELDS,
    DECIMAL_FIELDS,
    TEXT_FIELDS,
    CanonicalEntry,
    RowValidationError,
)

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# 01/Jul/2025 08:23 PM, 01/Jul/2025, and ranges "01/Jul/2025 12:00 AM - 05/Jul/2025 11:59 PM"
_DAY_MONTH_YEAR = re.compile(
    r"^(?P<day>\d{1,2})/(?P<month>[A-Za-z]{3})/(?P<year>\d{4})"
    r"(?:\s+(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?P<meridiem>[AaPp][Mm]))?"
    r"(?P<range>\s*-.*)?$"
)
_HOURS_MINUTES = re.compile(r"(\d{1,2}):(\d{2})")
_NON_DECIMAL = re.compile(r"[^0-9.]")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def stringify_value(value: Any) -> str | None:
    """
    Render a cell value as trimmed text; integral floats lose their ``.0``.
    """

    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return str(value).strip()


def parse_date(raw: Any) -> datetime | None:
    """
    Parse one date cell into a naive ``datetime``.

    Recognized, in order: native date/datetime values, ``dd/Mon/yyyy
    hh:mm AM|PM``, ``dd/Mon/yyyy``, the start of a ``... - ...`` range in
    either of those forms, then free-form text via ``dateutil``.
    """

    if is_blank(raw):
        return None
    if isinstance(raw, datetime):
        return raw.replace(tzinfo=None)
    if isinstance(raw, date):
        return datetime.combine(raw, time.min)
    if isinstance(raw, (int, float, bool)):
        return None

    text = str(raw).strip()
    match = _DAY_MONTH_YEAR.match(text)
    if match is not None:
        parsed = _from_day_month_year(match)
        if parsed is not None:
            return parsed

    try:
        parsed = dateparser.parse(text)
    except (ValueError, OverflowError):
        return None
    return parsed.replace(tzinfo=None)


def _from_day_month_year(match: re.Match[str]) -> datetime | None:
    month = _MONTHS.get(match.group("month").lower())
    if month is None:
        return None

    hour = 0
    minute = 0
    if match.group("hour") is not None:
        hour = int(match.group("hour"))
        minute = int(match.group("minute"))
        if not 1 <= hour <= 12:
            return None
        is_pm = match.group("meridiem").lower() == "pm"
        hour = hour % 12 + (12 if is_pm else 0)

    try:
        return datetime(
            int(match.group("year")),
            month,
            int(match.group("day")),
            hour,
            minute,
        )
    except ValueError:
        return None


def parse_decimal(raw: Any) -> float:
    """
    Parse one numeric cell into hours/points.

    ``None``/blank and spreadsheet formula residue (leading ``=``) give
    ``0.0``. ``H:MM`` becomes ``H + MM/60``. Anything else is stripped to
    digits and dots before conversion.
    """

    if is_blank(raw) or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, time):
        return raw.hour + raw.minute / 60
    if isinstance(raw, timedelta):
        return raw.total_seconds() / 3600

    text = str(raw).strip()
    if text.startswith("="):
        return 0.0

    match = _HOURS_MINUTES.search(text)
    if match is not None:
        return int(match.group(1)) + int(match.group(2)) / 60

    cleaned = _NON_DECIMAL.sub("", text)
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


class TimesheetRowParser:
    """
    Converts one normalized row mapping into a ``CanonicalEntry``.
    """

    def parse_row(
        self,
        *,
        normalized_row: Mapping[str, Any],
        row_number: int,
    ) -> tuple[CanonicalEntry, list[RowValidationError]]:
        """
        Parse text, decimal and date fields; collect unparseable dates.
        """

        errors: list[RowValidationError] = []
        values: dict[str, Any] = {}

        for name in TEXT_FIELDS:
            values[name] = stringify_value(normalized_row.get(name))

        for name in DECIMAL_FIELDS:
            values[name] = parse_decimal(normalized_row.get(name))

        for name in DATE_FIELDS:
            raw = normalized_row.get(name)
            parsed = parse_date(raw)
            if parsed is None and not is_blank(raw):
                errors.append(
                    RowValidationError(
                        row_number=row_number,
                        column=name,
                        message="Unrecognized date format; value stored as empty.",
                        value=stringify_value(raw),
                    )
                )
            values[name] = parsed

        return CanonicalEntry(**values), errors
