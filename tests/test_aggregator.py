"""Tests for ledger grouping, ordering and totals."""

from datetime import date
from decimal import Decimal

import pytest

from helpers import TODAY, txn
from registry_portal.ledger import build_statement, compute_totals, group_transactions
from registry_portal.models.ledger import LineStatus, PropertyFile, TransactionGroup


class TestGroupTransactions:
    """Tests for the payment-plan / other partition."""

    def test_partition_is_complete_and_disjoint(self):
        """Test that every line lands in exactly one block."""
        lines = [
            txn(sequence=1, installment_number=0),
            txn(sequence=2, installment_number=1),
            txn(sequence=3, installment_number=2),
            txn(sequence=4, installment_number=0),
        ]
        grouped = group_transactions(lines)

        assert grouped.count == len(lines)
        assert all(t.installment_number > 0 for t in grouped.payment_plan)
        assert all(t.installment_number == 0 for t in grouped.other)
        assert {t.sequence for t in grouped.payment_plan} == {2, 3}
        assert {t.sequence for t in grouped.other} == {1, 4}

    def test_plan_ordered_by_installment_number(self):
        lines = [
            txn(sequence=1, installment_number=3),
            txn(sequence=2, installment_number=1),
            txn(sequence=3, installment_number=2),
        ]
        grouped = group_transactions(lines)
        assert [t.installment_number for t in grouped.payment_plan] == [1, 2, 3]

    def test_plan_ties_broken_by_receipt_date(self):
        """Test that undated receipts sort before dated ones."""
        lines = [
            txn(sequence=1, installment_number=1, receipt_date="20-Oct-24"),
            txn(sequence=2, installment_number=1, receipt_date="-"),
            txn(sequence=3, installment_number=1, receipt_date="02-Oct-24"),
        ]
        grouped = group_transactions(lines)
        assert [t.sequence for t in grouped.payment_plan] == [2, 3, 1]

    def test_other_ordered_by_sequence(self):
        lines = [
            txn(sequence=9, installment_number=0),
            txn(sequence=4, installment_number=0),
            txn(sequence=7, installment_number=0),
        ]
        grouped = group_transactions(lines)
        assert [t.sequence for t in grouped.other] == [4, 7, 9]

    def test_equal_keys_keep_input_order(self):
        """Test that the sort is stable."""
        lines = [
            txn(sequence=5, installment_number=0, installment_name="first"),
            txn(sequence=5, installment_number=0, installment_name="second"),
        ]
        grouped = group_transactions(lines)
        assert [t.installment_name for t in grouped.other] == ["first", "second"]

    def test_empty(self):
        grouped = group_transactions([])
        assert grouped.payment_plan == ()
        assert grouped.other == ()


class TestComputeTotals:
    """Tests for block and grand totals."""

    def test_totals_with_nulls_as_zero(self):
        """Test that missing money fields count as zero."""
        grouped = group_transactions([
            txn(sequence=1, installment_number=1, receivable=100, amount_paid=60, surcharge=5),
            txn(sequence=2, installment_number=2, amount_paid=50),
            txn(sequence=3, installment_number=0, receivable=20),
        ])
        totals = compute_totals(grouped)

        assert totals.plan_receivable == Decimal("100")
        assert totals.plan_received == Decimal("110")
        assert totals.plan_surcharge == Decimal("5")
        assert totals.plan_balance == Decimal("-10")
        assert totals.other_receivable == Decimal("20")
        assert totals.other_received == Decimal("0")
        assert totals.grand_receivable == Decimal("120")
        assert totals.grand_received == Decimal("110")
        assert totals.grand_balance == Decimal("10")

    def test_grand_balance_clamped_at_zero(self):
        """Test that overpayment shows a zero grand balance."""
        grouped = group_transactions([
            txn(sequence=1, installment_number=1, receivable=100, amount_paid=150),
        ])
        totals = compute_totals(grouped)
        assert totals.grand_balance == Decimal("0")
        assert totals.plan_balance == Decimal("-50")

    def test_surcharge_only_summed_for_plan(self):
        grouped = group_transactions([
            txn(sequence=1, installment_number=0, receivable=10, surcharge=7),
        ])
        assert compute_totals(grouped).plan_surcharge == Decimal("0")

    def test_all_null_lines(self):
        grouped = group_transactions([txn(sequence=1, installment_number=1)])
        totals = compute_totals(grouped)
        assert totals.grand_receivable == Decimal("0")
        assert totals.grand_received == Decimal("0")
        assert totals.grand_balance == Decimal("0")

    def test_empty_ledger(self):
        totals = compute_totals(group_transactions([]))
        assert totals.grand_balance == Decimal("0")
        assert totals.plan_balance == Decimal("0")


class TestBuildStatement:
    """Tests for the full statement view."""

    def test_rows_follow_block_order(self, overdue_file):
        """Test that plan rows precede other rows, each in block order."""
        file = overdue_file.model_copy(update={
            "transactions": overdue_file.transactions + (
                txn(sequence=9, installment_number=0, installment_name="Processing Fee",
                    receivable=2500, amount_paid=2500, outstanding_balance=0),
            ),
        })
        statement = build_statement(file, TODAY)

        assert [r.transaction.sequence for r in statement.rows] == [1, 2, 9]
        assert [r.group for r in statement.rows] == [
            TransactionGroup.PAYMENT_PLAN,
            TransactionGroup.PAYMENT_PLAN,
            TransactionGroup.OTHER,
        ]
        assert len(statement.plan_rows) == 2
        assert len(statement.other_rows) == 1

    def test_rows_are_classified(self, overdue_file):
        statement = build_statement(overdue_file, TODAY)
        statuses = {r.transaction.sequence: r.status for r in statement.rows}

        assert statuses[1] == LineStatus.OVERDUE
        assert statuses[2] == LineStatus.PENDING_FUTURE
        assert statement.rows[0].is_overdue
        assert statement.rows[0].due_date == date(2024, 1, 10)

    def test_statement_totals(self, overdue_file):
        statement = build_statement(overdue_file, TODAY)
        assert statement.file_no == "DG-001"
        assert statement.as_of == TODAY
        assert statement.totals.grand_receivable == Decimal("8000")
        assert statement.totals.grand_balance == Decimal("8000")

    def test_outstanding_balance_not_reconciled(self):
        """Test that the ERP balance and the recomputed balance may disagree."""
        file = PropertyFile(
            file_no="F",
            transactions=(
                txn(sequence=1, installment_number=1, due_date="10-Jan-24",
                    receivable=1000, amount_paid=1000, outstanding_balance=400),
            ),
        )
        statement = build_statement(file, TODAY)
        assert statement.totals.grand_balance == Decimal("0")
        assert statement.rows[0].status == LineStatus.OVERDUE

    def test_deterministic_and_does_not_mutate_input(self, overdue_file):
        """Test that the same input and day always give the same statement."""
        before = overdue_file.model_dump()

        first = build_statement(overdue_file, TODAY)
        second = build_statement(overdue_file, TODAY)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()
        assert overdue_file.model_dump() == before

    def test_empty_file(self):
        statement = build_statement(PropertyFile(file_no="EMPTY"), TODAY)
        assert statement.rows == ()
        assert statement.totals.grand_balance == Decimal("0")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
