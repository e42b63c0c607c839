"""
Ledger Aggregation

Pure functions that turn a property file's transaction log into the
grouped, ordered, totalled view printed on an account statement.

Nothing here performs I/O, logs, or mutates its input. The same file and
the same `today` always produce the same statement, so a render pass can
call these per file, in any order, from any thread.

ORDERING:
- Payment plan: installment number, then receipt date (undated first)
- Other: ERP sequence number

TOTALS use null-as-zero for every money field. Only the grand balance
is clamped at zero; subtotal balances may go negative on overpayment.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from registry_portal.ledger.alerts import classify_line
from registry_portal.ledger.dates import EPOCH, as_day, parse_sap_date
from registry_portal.models.ledger import (
    GroupedLedger,
    LedgerStatement,
    LedgerTotals,
    PropertyFile,
    StatementRow,
    Transaction,
)

ZERO = Decimal("0")


def _amount(value: Optional[Decimal]) -> Decimal:
    return value if value is not None else ZERO


def _plan_sort_key(t: Transaction) -> tuple[int, date]:
    return t.installment_number, parse_sap_date(t.receipt_date) or EPOCH


def group_transactions(transactions: Iterable[Transaction]) -> GroupedLedger:
    """
    Partition transactions into the payment-plan and other blocks.

    Every transaction lands in exactly one block. Both blocks are sorted
    with a stable sort, so equal keys keep their input order.
    """
    payment_plan = []
    other = []

    for t in transactions:
        if t.installment_number > 0:
            payment_plan.append(t)
        else:
            other.append(t)

    payment_plan.sort(key=_plan_sort_key)
    other.sort(key=lambda t: t.sequence)

    return GroupedLedger(payment_plan=tuple(payment_plan), other=tuple(other))


def compute_totals(grouped: GroupedLedger) -> LedgerTotals:
    """Sum receivable, received and surcharge per block and overall."""
    plan_receivable = sum((_amount(t.receivable) for t in grouped.payment_plan), ZERO)
    plan_received = sum((_amount(t.amount_paid) for t in grouped.payment_plan), ZERO)
    plan_surcharge = sum((_amount(t.surcharge) for t in grouped.payment_plan), ZERO)

    other_receivable = sum((_amount(t.receivable) for t in grouped.other), ZERO)
    other_received = sum((_amount(t.amount_paid) for t in grouped.other), ZERO)

    grand_receivable = plan_receivable + other_receivable
    grand_received = plan_received + other_received

    return LedgerTotals(
        plan_receivable=plan_receivable,
        plan_received=plan_received,
        plan_surcharge=plan_surcharge,
        other_receivable=other_receivable,
        other_received=other_received,
        grand_receivable=grand_receivable,
        grand_received=grand_received,
        grand_balance=max(ZERO, grand_receivable - grand_received),
    )


def build_statement(
    file: PropertyFile,
    today: Union[date, datetime],
) -> LedgerStatement:
    """
    Build the full statement view of one file as of `today`.

    `today` should be captured once per render pass and reused for every
    file, so that two files rendered together never disagree about which
    lines are overdue.
    """
    as_of = as_day(today)
    grouped = group_transactions(file.transactions)

    rows = tuple(
        StatementRow(
            transaction=t,
            group=t.group,
            status=classify_line(t, as_of),
            due_date=parse_sap_date(t.due_date),
            receipt_date=parse_sap_date(t.receipt_date),
        )
        for t in grouped.payment_plan + grouped.other
    )

    return LedgerStatement(
        file_no=file.file_no,
        as_of=as_of,
        grouped=grouped,
        totals=compute_totals(grouped),
        rows=rows,
    )
