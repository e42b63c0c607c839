"""
Data Models Package

This package contains all Pydantic models used in the Property Registry Portal.
All data flowing through the system must conform to these schemas.
"""

from registry_portal.models.ledger import (
    Alert,
    AlertKind,
    FileCard,
    FileStatus,
    GroupedLedger,
    LedgerStatement,
    LedgerTotals,
    LineStatus,
    PortfolioStats,
    PropertyFile,
    StatementRow,
    Transaction,
    TransactionGroup,
)
from registry_portal.models.portal import (
    FileSnapshot,
    LineSnapshot,
    NotificationCategory,
    NotificationMetadata,
    NotificationType,
    PortalNotification,
    User,
    UserRole,
    UserStatus,
)
from registry_portal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Alert",
    "AlertKind",
    "FileCard",
    "FileStatus",
    "GroupedLedger",
    "LedgerStatement",
    "LedgerTotals",
    "LineStatus",
    "PortfolioStats",
    "PropertyFile",
    "StatementRow",
    "Transaction",
    "TransactionGroup",
    # Portal models
    "FileSnapshot",
    "LineSnapshot",
    "NotificationCategory",
    "NotificationMetadata",
    "NotificationType",
    "PortalNotification",
    "User",
    "UserRole",
    "UserStatus",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
