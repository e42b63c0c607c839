"""
Audit Logger

DESIGN DECISION: Every render pass and AI call is logged.
This provides:
1. Traceability of what each user was shown
2. Debugging capability when the AI service fails open
3. An activity history the portal can display

The audit logger:
- Is async to match the flows that call it
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to tie one render pass together
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from registry_portal.models.audit import AuditEvent, AuditEventBuilder
from registry_portal.services.registry import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog to emit JSON lines through the stdlib logger."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (for the portal's activity panel), if given
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for recent events.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("registry_portal.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_file_not_found(
        self,
        file_no: str,
        user_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.file_not_found(
                file_no=file_no,
                user_id=user_id,
                correlation_id=correlation_id,
            )
        )

    async def log_statement_rendered(
        self,
        file_no: str,
        user_id: Optional[str],
        line_count: int,
        grand_balance: str,
        overdue_lines: int,
        correlation_id: UUID,
    ) -> None:
        """Log a statement render."""
        event = AuditEventBuilder.statement_rendered(
            file_no=file_no,
            user_id=user_id,
            line_count=line_count,
            grand_balance=grand_balance,
            overdue_lines=overdue_lines,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_dashboard_rendered(
        self,
        user_id: Optional[str],
        file_count: int,
        overdue: int,
        upcoming: int,
        correlation_id: UUID,
    ) -> None:
        """Log a dashboard render and the alerts it raised."""
        await self.log(
            AuditEventBuilder.dashboard_rendered(
                user_id=user_id,
                file_count=file_count,
                correlation_id=correlation_id,
            )
        )
        await self.log(
            AuditEventBuilder.alerts_derived(
                user_id=user_id,
                overdue=overdue,
                upcoming=upcoming,
                correlation_id=correlation_id,
            )
        )

    async def log_summary_generated(
        self,
        user_id: Optional[str],
        file_count: int,
        used_fallback: bool,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.summary_generated(
            user_id=user_id,
            file_count=file_count,
            used_fallback=used_fallback,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_chat_answered(
        self,
        user_id: Optional[str],
        role: str,
        used_fallback: bool,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.chat_answered(
            user_id=user_id,
            role=role,
            used_fallback=used_fallback,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_ai_service_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an AI service error that was answered with a fallback."""
        event = AuditEventBuilder.ai_service_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a render pass or user action.
    Pass it through all subsequent operations.
    """
    return uuid4()
