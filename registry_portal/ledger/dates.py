"""
SAP Date Parsing

The registry export writes dates as DD-Mon-YY or DD-Mon-YYYY
(e.g. 10-Jan-24) and uses '-', '' or 'NULL' for "no date".

parse_sap_date() is total: every input maps to a date or to None.
Two-digit years are always 20xx; there is no century windowing.
"""

from datetime import date, datetime
from typing import Optional, Union

MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

MONTH_NAMES = {number: name for name, number in MONTHS.items()}

NO_DATE_SENTINELS = frozenset({"", "-", "NULL"})

# Receipt dates that don't parse sort before every real date
EPOCH = date(1970, 1, 1)


def parse_sap_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a DD-Mon-YY[YY] string.

    Returns None for sentinels, wrong shapes, unknown months and
    impossible calendar days. Never raises.
    """
    if not isinstance(value, str) or value in NO_DATE_SENTINELS:
        return None

    try:
        parts = value.split("-")
        if len(parts) != 3:
            return None

        day_part, month_part, year_part = parts
        month = MONTHS.get(month_part[:1].upper() + month_part[1:3].lower())
        if month is None:
            return None

        day = int(day_part)
        year = int(year_part)
        if year < 100:
            year += 2000

        return date(year, month, day)
    except (ValueError, TypeError, OverflowError):
        return None


def format_sap_date(value: Optional[date]) -> str:
    """Render a date the way the statement prints it: 10-Jan-2024."""
    if value is None:
        return "-"
    return f"{value.day:02d}-{MONTH_NAMES[value.month]}-{value.year}"


def as_day(value: Union[date, datetime]) -> date:
    """Normalize a reference 'today' to a calendar day (midnight)."""
    if isinstance(value, datetime):
        return value.date()
    return value
