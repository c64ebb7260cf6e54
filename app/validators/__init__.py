"""
app/validators package marker.
"""

from app.validators.value_parser import TimesheetRowParser, parse_date, parse_decimal

__all__ = [
    "TimesheetRowParser",
    "parse_date",
    "parse_decimal",
]
