"""
Overdue and Alert Classification

Decides, for a given day, which ledger lines are overdue, which single
line each file is flagged for on the dashboard, and the file's status
label.

A line is overdue when its due date parses, falls strictly before today,
and the ERP's own outstanding balance for the line is positive. The
balance is never recomputed from receivable - paid.

Like the aggregator, every function here is pure. `today` is supplied by
the caller; nothing reads the clock.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from registry_portal.ledger.dates import as_day, format_sap_date, parse_sap_date
from registry_portal.ledger.formatting import format_currency
from registry_portal.models.ledger import (
    Alert,
    AlertKind,
    FileCard,
    FileStatus,
    LineStatus,
    PortfolioStats,
    PropertyFile,
    Transaction,
)
from registry_portal.models.portal import (
    NotificationCategory,
    NotificationMetadata,
    NotificationType,
    PortalNotification,
)

ZERO = Decimal("0")

DayLike = Union[date, datetime]


def outstanding(t: Transaction) -> Decimal:
    """Authoritative outstanding balance of a line, absent as zero."""
    return t.outstanding_balance if t.outstanding_balance is not None else ZERO


def is_overdue(t: Transaction, today: DayLike) -> bool:
    due = parse_sap_date(t.due_date)
    return due is not None and due < as_day(today) and outstanding(t) > 0


def is_next_commitment(t: Transaction, today: DayLike) -> bool:
    """Due today or later, something receivable, nothing paid yet."""
    due = parse_sap_date(t.due_date)
    return (
        due is not None
        and due >= as_day(today)
        and t.is_unpaid
        and (t.receivable or ZERO) > 0
    )


def classify_line(t: Transaction, today: DayLike) -> LineStatus:
    """
    Where a line stands on `today`.

    SETTLED means the ERP reports nothing outstanding and the line has
    either been paid against or already fallen due.
    """
    if is_overdue(t, today):
        return LineStatus.OVERDUE

    if outstanding(t) <= 0:
        due = parse_sap_date(t.due_date)
        if not t.is_unpaid or (due is not None and due < as_day(today)):
            return LineStatus.SETTLED

    return LineStatus.PENDING_FUTURE


def overdue_lines(file: PropertyFile, today: DayLike) -> list[Transaction]:
    """Overdue lines of a file, earliest due first (input order on ties)."""
    day = as_day(today)
    lines = [t for t in file.transactions if is_overdue(t, day)]
    return sorted(lines, key=lambda t: parse_sap_date(t.due_date))


def primary_alert(file: PropertyFile, today: DayLike) -> Optional[Alert]:
    """
    The one line a file is flagged for on the dashboard.

    The earliest-due overdue line if there is one, otherwise the
    earliest-due upcoming unpaid line. None when neither exists.
    """
    day = as_day(today)

    overdue = overdue_lines(file, day)
    if overdue:
        line, kind = overdue[0], AlertKind.OVERDUE
    else:
        upcoming = [t for t in file.transactions if is_next_commitment(t, day)]
        if not upcoming:
            return None
        line = min(upcoming, key=lambda t: parse_sap_date(t.due_date))
        kind = AlertKind.UPCOMING

    return Alert(
        file_no=file.file_no,
        plot_size=file.plot_size,
        owner_name=file.owner_name,
        transaction=line,
        kind=kind,
        due_date=parse_sap_date(line.due_date),
    )


def file_status(file: PropertyFile, today: DayLike) -> FileStatus:
    day = as_day(today)
    if any(is_overdue(t, day) for t in file.transactions):
        return FileStatus.ACTION_REQUIRED
    if file.balance > 0:
        return FileStatus.ACTIVE_LEDGER
    return FileStatus.CLEARANCE_VERIFIED


def portfolio_alerts(files: Iterable[PropertyFile], today: DayLike) -> list[Alert]:
    """
    At most one alert per file, overdue alerts first.

    Within each kind, alerts keep the order the files were given in.
    """
    day = as_day(today)
    alerts = []
    for file in files:
        alert = primary_alert(file, day)
        if alert is not None:
            alerts.append(alert)
    return sorted(alerts, key=lambda a: not a.is_overdue)


def file_card(file: PropertyFile, today: DayLike) -> FileCard:
    """
    Dashboard card for a file.

    The headline is the first overdue line in ledger order, or else the
    first unpaid line with something receivable, whatever its due date.
    """
    day = as_day(today)

    headline = next((t for t in file.transactions if is_overdue(t, day)), None)
    headline_is_overdue = headline is not None
    if headline is None:
        headline = next(
            (t for t in file.transactions if t.is_unpaid and (t.receivable or ZERO) > 0),
            None,
        )

    return FileCard(
        file_no=file.file_no,
        plot_size=file.plot_size,
        plot_value=file.plot_value,
        status=file_status(file, day),
        headline=headline,
        headline_is_overdue=headline_is_overdue,
    )


def portfolio_stats(files: Sequence[PropertyFile], alerts: Sequence[Alert]) -> PortfolioStats:
    return PortfolioStats(
        verified_assets=len(files),
        active_records=sum(1 for f in files if f.balance > 0),
        alerts=sum(1 for a in alerts if a.is_overdue),
    )


def build_notifications(
    alerts: Iterable[Alert],
    user_id: str,
    today: DayLike,
    currency_code: str = "PKR",
) -> list[PortalNotification]:
    """
    Turn dashboard alerts into alert-center notifications.

    Ids are derived from the file and line, so re-deriving notifications
    on the next render yields the same ids.
    """
    day = as_day(today)
    notifications = []

    for alert in alerts:
        t = alert.transaction
        label = t.installment_name or "Ledger entry"
        amount = format_currency(alert.amount, currency_code)
        due = format_sap_date(alert.due_date)

        if alert.is_overdue:
            title = f"Payment Overdue: File {alert.file_no}"
            message = f"{label} was due on {due}. Outstanding balance: {amount}."
            kind = NotificationType.CRITICAL
        else:
            title = f"Upcoming Payment: File {alert.file_no}"
            message = f"{label} of {amount} falls due on {due}."
            kind = NotificationType.WARNING

        notifications.append(
            PortalNotification(
                id=f"{alert.file_no}:{t.sequence}:{t.installment_number}",
                user_id=user_id,
                title=title,
                message=message,
                type=kind,
                category=NotificationCategory.PAYMENT,
                issued_on=day,
                action_url=f"/statement/{alert.file_no}",
                metadata=NotificationMetadata(
                    amount=alert.amount,
                    file_no=alert.file_no,
                    due_date=alert.due_date,
                ),
            )
        )

    return notifications
