"""
Audit Models for the Property Registry Portal

Every render pass and every call to the AI service is logged.
This provides:
1. Traceability of what a user was shown and when
2. Debugging information when the AI service misbehaves
3. A record of alerts raised against each file

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Registry
    FILE_NOT_FOUND = "file_not_found"

    # Rendering
    STATEMENT_RENDERED = "statement_rendered"
    DASHBOARD_RENDERED = "dashboard_rendered"
    ALERTS_DERIVED = "alerts_derived"

    # AI service
    SUMMARY_GENERATED = "summary_generated"
    CHAT_ANSWERED = "chat_answered"
    AI_SERVICE_FAILED = "ai_service_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'file', 'portfolio', 'chat')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Identifier of the entity, e.g. a file number"
    )
    user_id: Optional[str] = None

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one render pass or user action"
    )

    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.statement_rendered(file_no, user_id, ...)
        event = AuditEventBuilder.ai_service_failed("summary", str(e), ...)
    """

    @staticmethod
    def file_not_found(
        file_no: str,
        user_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILE_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="file",
            entity_id=file_no,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"File {file_no} not visible to user",
        )

    @staticmethod
    def statement_rendered(
        file_no: str,
        user_id: Optional[str],
        line_count: int,
        grand_balance: str,
        overdue_lines: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATEMENT_RENDERED,
            entity_type="file",
            entity_id=file_no,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Statement rendered for {file_no}",
            details={
                "line_count": line_count,
                "grand_balance": grand_balance,
                "overdue_lines": overdue_lines,
            },
        )

    @staticmethod
    def dashboard_rendered(
        user_id: Optional[str],
        file_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DASHBOARD_RENDERED,
            entity_type="portfolio",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Dashboard rendered with {file_count} files",
            details={"file_count": file_count},
        )

    @staticmethod
    def alerts_derived(
        user_id: Optional[str],
        overdue: int,
        upcoming: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALERTS_DERIVED,
            severity=AuditSeverity.WARNING if overdue else AuditSeverity.INFO,
            entity_type="portfolio",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Alerts derived: {overdue} overdue, {upcoming} upcoming",
            details={
                "overdue": overdue,
                "upcoming": upcoming,
            },
        )

    @staticmethod
    def summary_generated(
        user_id: Optional[str],
        file_count: int,
        used_fallback: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_GENERATED,
            entity_type="portfolio",
            user_id=user_id,
            correlation_id=correlation_id,
            description="Portfolio summary generated",
            details={
                "file_count": file_count,
                "used_fallback": used_fallback,
            },
        )

    @staticmethod
    def chat_answered(
        user_id: Optional[str],
        role: str,
        used_fallback: bool,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_ANSWERED,
            entity_type="chat",
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Assistant answered a {role} question",
            details={
                "role": role,
                "used_fallback": used_fallback,
            },
        )

    @staticmethod
    def ai_service_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AI_SERVICE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ai",
            entity_id=operation,
            correlation_id=correlation_id,
            description=f"AI service error during {operation}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
