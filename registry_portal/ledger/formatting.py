"""Display formatting for statement and dashboard figures."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

WHOLE = Decimal("1")


def _whole(value: Decimal) -> int:
    return int(Decimal(value).quantize(WHOLE, rounding=ROUND_HALF_UP))


def format_amount(value: Optional[Decimal]) -> str:
    """Statement cell: '-' for empty or zero, else whole units with separators."""
    if value is None or value == 0:
        return "-"
    return f"{_whole(value):,}"


def format_currency(value: Optional[Decimal], currency_code: str = "PKR") -> str:
    """Dashboard figure, e.g. 'PKR 1,250,000'."""
    return f"{currency_code} {_whole(value or Decimal('0')):,}"
