"""
Shared fixtures.

Every test that depends on "today" uses the fixed day in helpers.py, so results
never depend on when the suite runs.
"""

from datetime import date

import pytest

from helpers import TODAY, txn
from registry_portal.audit import AuditLogger
from registry_portal.models.ledger import PropertyFile
from registry_portal.models.portal import User, UserRole
from registry_portal.services.registry import InMemoryAuditStorage, InMemoryRegistryStore


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def client_user() -> User:
    return User(id="u-1", cnic="33100-1234567-1", name="Ahmed Raza", role=UserRole.CLIENT)


@pytest.fixture
def other_client() -> User:
    return User(id="u-2", cnic="33100-7654321-3", name="Sana Malik", role=UserRole.CLIENT)


@pytest.fixture
def admin_user() -> User:
    return User(id="u-admin", cnic="00000-0000000-0", name="Admin", role=UserRole.ADMIN)


@pytest.fixture
def overdue_file() -> PropertyFile:
    """One overdue installment and one upcoming one."""
    return PropertyFile(
        file_no="DG-001",
        plot_size="5 Marla",
        plot_value=4500000,
        balance=8000,
        owner_name="Ahmed Raza",
        owner_cnic="33100-1234567-1",
        transactions=(
            txn(sequence=2, installment_number=2, installment_name="2nd Installment",
                due_date="10-Jun-24", receivable=3000),
            txn(sequence=1, installment_number=1, installment_name="1st Installment",
                due_date="10-Jan-24", receivable=5000, outstanding_balance=5000),
        ),
    )


@pytest.fixture
def upcoming_file() -> PropertyFile:
    """Nothing overdue, one future installment unpaid."""
    return PropertyFile(
        file_no="DG-002",
        plot_size="10 Marla",
        balance=3000,
        owner_name="Ahmed Raza",
        owner_cnic="3310012345671",
        transactions=(
            txn(sequence=1, installment_number=1, installment_name="Down Payment",
                due_date="10-Dec-23", receivable=9000, amount_paid=9000,
                outstanding_balance=0, receipt_date="09-Dec-23"),
            txn(sequence=2, installment_number=2, installment_name="1st Installment",
                due_date="10-Apr-24", receivable=3000, outstanding_balance=3000),
        ),
    )


@pytest.fixture
def cleared_file() -> PropertyFile:
    """Fully paid file owned by another client."""
    return PropertyFile(
        file_no="DG-003",
        plot_size="1 Kanal",
        balance=0,
        owner_name="Sana Malik",
        owner_cnic="33100-7654321-3",
        transactions=(
            txn(sequence=1, installment_number=1, installment_name="Lump Sum",
                due_date="01-Mar-22", receivable=8000, amount_paid=8000,
                outstanding_balance=0, receipt_date="01-Mar-22"),
        ),
    )


@pytest.fixture
def registry(overdue_file, upcoming_file, cleared_file, client_user, other_client, admin_user):
    return InMemoryRegistryStore(
        files=[overdue_file, upcoming_file, cleared_file],
        users=[client_user, other_client, admin_user],
    )


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)
