"""
Ledger engine package.

Pure, synchronous functions over a property file's transactions.
"""

from registry_portal.ledger.aggregator import (
    build_statement,
    compute_totals,
    group_transactions,
)
from registry_portal.ledger.alerts import (
    build_notifications,
    classify_line,
    file_card,
    file_status,
    is_overdue,
    overdue_lines,
    portfolio_alerts,
    portfolio_stats,
    primary_alert,
)
from registry_portal.ledger.dates import as_day, format_sap_date, parse_sap_date
from registry_portal.ledger.formatting import format_amount, format_currency

__all__ = [
    "as_day",
    "build_notifications",
    "build_statement",
    "classify_line",
    "compute_totals",
    "file_card",
    "file_status",
    "format_amount",
    "format_currency",
    "format_sap_date",
    "group_transactions",
    "is_overdue",
    "overdue_lines",
    "parse_sap_date",
    "portfolio_alerts",
    "portfolio_stats",
    "primary_alert",
]
