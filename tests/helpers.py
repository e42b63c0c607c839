"""Builders shared by the test modules."""

from datetime import date

from registry_portal.models.ledger import Transaction

TODAY = date(2024, 3, 1)


def txn(**fields) -> Transaction:
    """Build a transaction with only the fields a test cares about."""
    return Transaction(**fields)
