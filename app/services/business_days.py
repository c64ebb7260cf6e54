"""
app/services/business_days.py

Inclusive Monday-Friday day counting (spreadsheet NETWORKDAYS semantics).

Formula
-------
business_days(start, end) = weekdays in [start, end], both ends included
business_days(d, d)       = 1
business_days(end, start) = -business_days(start, end)
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import numpy as np


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def business_days(start: date | datetime, end: date | datetime) -> float:
    """
    Count weekdays from ``start`` to ``end`` inclusive.

    Only the calendar day of each endpoint matters; times are ignored.
    """

    start_day = as_date(start)
    end_day = as_date(end)

    if end_day < start_day:
        return -business_days(end_day, start_day)
    if start_day == end_day:
        return 1.0

    # busday_count excludes the end date, so shift it by one day.
    return float(np.busday_count(start_day, end_day + timedelta(days=1)))
