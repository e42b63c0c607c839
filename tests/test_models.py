"""
Tests for the Property Registry Portal models

Test strategy:
1. Unit tests for the ledger engine (pure functions, fixed "today")
2. Integration tests for flows (with an in-memory registry and fake AI models)
3. No real API calls in tests
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from registry_portal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from registry_portal.models.ledger import (
    Alert,
    AlertKind,
    FileCard,
    FileStatus,
    LedgerTotals,
    PropertyFile,
    Transaction,
    TransactionGroup,
)
from registry_portal.models.portal import FileSnapshot, LineSnapshot, User, UserRole


class TestTransactionModel:
    """Tests for parsing ERP ledger lines."""

    def test_parses_erp_keys(self):
        """Test that the export's short keys map onto readable fields."""
        t = Transaction.model_validate({
            "seq": 3,
            "u_intno": 2,
            "u_intname": "1st Installment",
            "duedate": "10-Jan-24",
            "receivable": 125000,
            "balduedeb": 125000,
            "mode": "Cheque",
            "instrument_no": 4512,
        })
        assert t.sequence == 3
        assert t.installment_number == 2
        assert t.installment_name == "1st Installment"
        assert t.due_date == "10-Jan-24"
        assert t.receivable == Decimal("125000")
        assert t.outstanding_balance == Decimal("125000")
        assert t.payment_mode == "Cheque"
        assert t.instrument_number == "4512"

    def test_money_fields_default_to_none(self):
        """Test that absent money fields stay None rather than zero."""
        t = Transaction(sequence=1)
        assert t.receivable is None
        assert t.amount_paid is None
        assert t.outstanding_balance is None
        assert t.surcharge is None

    def test_negative_installment_number_rejected(self):
        """Test that u_intno below zero is rejected."""
        with pytest.raises(ValidationError):
            Transaction.model_validate({"seq": 1, "u_intno": -1})

    def test_is_frozen(self):
        """Test that ledger lines cannot be mutated."""
        t = Transaction(sequence=1, receivable=100)
        with pytest.raises(ValidationError):
            t.receivable = Decimal("5")

    def test_group(self):
        """Test block membership by installment number."""
        assert Transaction(installment_number=1).group == TransactionGroup.PAYMENT_PLAN
        assert Transaction(installment_number=0).group == TransactionGroup.OTHER

    def test_is_unpaid(self):
        """Test that both null and zero payments count as unpaid."""
        assert Transaction().is_unpaid
        assert Transaction(amount_paid=0).is_unpaid
        assert not Transaction(amount_paid=10).is_unpaid

    def test_ignores_unknown_keys(self):
        """Test that extra ERP columns are dropped."""
        t = Transaction.model_validate({"seq": 1, "u_docentry": 99})
        assert t.sequence == 1


class TestPropertyFileModel:
    """Tests for property files."""

    def test_parses_camel_case_export(self):
        """Test parsing a file record as the registry exports it."""
        f = PropertyFile.model_validate({
            "fileNo": "DG-1",
            "plotSize": "5 Marla",
            "plotValue": 4500000,
            "ownerName": "  Ahmed Raza ",
            "ownerCNIC": "33100-1234567-1",
            "transactions": [{"seq": 1, "u_intno": 1}],
        })
        assert f.file_no == "DG-1"
        assert f.plot_value == Decimal("4500000")
        assert f.owner_name == "Ahmed Raza"
        assert isinstance(f.transactions, tuple)
        assert f.transactions[0].installment_number == 1

    def test_file_number_required(self):
        """Test that an empty file number is rejected."""
        with pytest.raises(ValidationError):
            PropertyFile(file_no="")


class TestDerivedModels:
    """Tests for totals, alerts and cards."""

    def test_subtotal_balances_are_not_clamped(self):
        """Test that plan and other balances may go negative."""
        totals = LedgerTotals(
            plan_receivable=Decimal("100"),
            plan_received=Decimal("150"),
            other_receivable=Decimal("20"),
            other_received=Decimal("5"),
        )
        assert totals.plan_balance == Decimal("-50")
        assert totals.other_balance == Decimal("15")

    def test_alert_amount_depends_on_kind(self):
        """Test overdue alerts show the outstanding balance, upcoming the receivable."""
        line = Transaction(receivable=3000, outstanding_balance=1200)
        overdue = Alert(file_no="F", transaction=line, kind=AlertKind.OVERDUE)
        upcoming = Alert(file_no="F", transaction=line, kind=AlertKind.UPCOMING)
        assert overdue.is_overdue
        assert overdue.amount == Decimal("1200")
        assert not upcoming.is_overdue
        assert upcoming.amount == Decimal("3000")

    def test_card_without_headline(self):
        """Test that a clear card has no amount."""
        card = FileCard(file_no="F", status=FileStatus.CLEARANCE_VERIFIED)
        assert card.headline_amount is None

    def test_status_labels(self):
        """Test the labels shown on file cards."""
        assert FileStatus.ACTION_REQUIRED.value == "Action Required"
        assert FileStatus.ACTIVE_LEDGER.value == "Active Ledger"
        assert FileStatus.CLEARANCE_VERIFIED.value == "Clearance Verified"


class TestPortalModels:
    """Tests for users and AI projections."""

    def test_user_roles(self):
        """Test admin detection."""
        admin = User(id="a", cnic="1", name="Admin", role="ADMIN")
        client = User(id="c", cnic="2", name="Client")
        assert admin.is_admin
        assert not client.is_admin
        assert client.role == UserRole.CLIENT

    def test_file_snapshot_exposes_only_summary_fields(self):
        """Test that the AI projection carries no CNIC or contact data."""
        f = PropertyFile(
            file_no="DG-1",
            plot_size="5 Marla",
            plot_value=4500000,
            payment_received=1800000,
            balance=2700000,
            overdue=125000,
            owner_name="Ahmed Raza",
            owner_cnic="33100-1234567-1",
            cell_no="0300-1234567",
        )
        dumped = FileSnapshot.from_file(f).model_dump(by_alias=True)
        assert set(dumped) == {"id", "owner", "size", "totalVal", "paid", "balance", "overdue"}
        assert dumped["totalVal"] == 4500000.0
        assert "33100-1234567-1" not in str(dumped)

    def test_line_snapshot(self):
        """Test the per-line projection used in client chats."""
        t = Transaction(installment_name="2nd Installment", due_date="10-Feb-24",
                        receivable=125000, outstanding_balance=125000)
        dumped = LineSnapshot.from_transaction("DG-1", t).model_dump(by_alias=True)
        assert dumped == {
            "file": "DG-1",
            "description": "2nd Installment",
            "due": "10-Feb-24",
            "payable": 125000.0,
            "paid": 0.0,
            "balance": 125000.0,
        }


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test basic AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.STATEMENT_RENDERED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.STATEMENT_RENDERED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.FILE_NOT_FOUND,
            entity_id="DG-1",
            user_id="u-1",
            correlation_id=correlation_id,
            description="Test",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "file_not_found"
        assert log_dict["entity_id"] == "DG-1"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert "timestamp" in log_dict

    def test_builder_statement_rendered(self):
        """Test the statement event carries its figures."""
        correlation_id = uuid4()
        event = AuditEventBuilder.statement_rendered(
            file_no="DG-1",
            user_id="u-1",
            line_count=5,
            grand_balance="125000",
            overdue_lines=1,
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.STATEMENT_RENDERED
        assert event.entity_type == "file"
        assert event.details["overdue_lines"] == 1

    def test_builder_alerts_severity(self):
        """Test that overdue alerts raise the severity to WARNING."""
        quiet = AuditEventBuilder.alerts_derived("u-1", overdue=0, upcoming=2, correlation_id=uuid4())
        loud = AuditEventBuilder.alerts_derived("u-1", overdue=1, upcoming=0, correlation_id=uuid4())
        assert quiet.severity == AuditSeverity.INFO
        assert loud.severity == AuditSeverity.WARNING

    def test_builders_accept_long_file_numbers(self):
        """Test that a long file number does not break the audit trail."""
        file_no = "DG-" + "7" * 600
        missing = AuditEventBuilder.file_not_found(file_no, "u-1")
        rendered = AuditEventBuilder.statement_rendered(
            file_no=file_no,
            user_id="u-1",
            line_count=1,
            grand_balance="0",
            overdue_lines=0,
            correlation_id=uuid4(),
        )
        assert file_no in missing.description
        assert rendered.entity_id == file_no

    def test_builder_ai_service_failed(self):
        """Test the AI failure event."""
        event = AuditEventBuilder.ai_service_failed("summary", "quota exceeded")
        assert event.severity == AuditSeverity.ERROR
        assert event.entity_id == "summary"
        assert event.error_message == "quota exceeded"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
