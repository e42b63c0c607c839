"""
Main Orchestrator for the Property Registry Portal

This module ties together all the components and defines the
end-to-end flows for:
1. Statement (file number → visibility check → ledger statement)
2. Dashboard (user → visible files → cards, alerts, notifications)
3. Assistant (user → file projection → AI summary / chat reply)

DESIGN DECISION: The orchestrator owns the clock.
A RenderContext captures "today" once per render pass and every ledger
call in that pass receives the same day, so a statement and the
dashboard rendered together can never disagree about what is overdue.
The ledger engine itself stays pure; all logging happens here.
"""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field

from registry_portal.agents import (
    CHAT_FALLBACK,
    EMPTY_PORTFOLIO_SUMMARY,
    SUMMARY_FALLBACK,
    AgentReply,
    PortfolioSummaryAgent,
    RegistryChatAgent,
)
from registry_portal.audit import AuditLogger, configure_logging, create_correlation_id
from registry_portal.config import get_settings
from registry_portal.ledger import (
    build_notifications,
    build_statement,
    file_card,
    portfolio_alerts,
    portfolio_stats,
)
from registry_portal.models.ledger import (
    Alert,
    FileCard,
    LedgerStatement,
    PortfolioStats,
    PropertyFile,
)
from registry_portal.models.portal import PortalNotification, User
from registry_portal.services.registry import (
    FileNotFoundInRegistryError,
    InMemoryAuditStorage,
    InMemoryRegistryStore,
    RegistryError,
    RegistryLoadError,
    RegistryStoreInterface,
)

logger = structlog.get_logger(__name__)


class RenderContext(BaseModel):
    """The day and correlation id shared by everything in one render pass."""
    model_config = ConfigDict(frozen=True)

    today: date = Field(default_factory=date.today)
    correlation_id: UUID = Field(default_factory=create_correlation_id)


class DashboardView(BaseModel):
    """Everything the dashboard page shows for one user."""
    model_config = ConfigDict(frozen=True)

    as_of: date
    files: tuple[PropertyFile, ...] = ()
    cards: tuple[FileCard, ...] = ()
    alerts: tuple[Alert, ...] = ()
    stats: PortfolioStats
    notifications: tuple[PortalNotification, ...] = ()

    @property
    def overdue_alerts(self) -> tuple[Alert, ...]:
        return tuple(a for a in self.alerts if a.is_overdue)

    def summary_key(self, user_id: str) -> tuple[str, tuple[str, ...]]:
        """Identifies the portfolio a summary was written for."""
        return user_id, tuple(f.file_no for f in self.files)


async def _visible_files(
    registry: RegistryStoreInterface,
    user: User,
    audit_logger: Optional[AuditLogger],
    context: RenderContext,
) -> list[PropertyFile]:
    """Files the user may see, auditing registry failures before re-raising."""
    try:
        return await registry.files_for_user(user)
    except RegistryError as e:
        if audit_logger:
            await audit_logger.log_error(
                error_type="registry_unavailable",
                error_message=str(e),
                details={"user_id": user.id},
                correlation_id=context.correlation_id,
            )
        raise


class StatementFlow:
    """
    Renders the account statement of one file.

    A user can only open files visible to them; anything else is
    reported as not found.
    """

    def __init__(
        self,
        registry: RegistryStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._registry = registry
        self._audit_logger = audit_logger

    async def render(
        self,
        file_no: str,
        user: User,
        context: Optional[RenderContext] = None,
    ) -> LedgerStatement:
        """
        Build the statement of `file_no` as of the context's day.

        Raises:
            FileNotFoundInRegistryError: If the file is unknown or not the user's
        """
        context = context or RenderContext()

        files = await _visible_files(self._registry, user, self._audit_logger, context)
        file = next((f for f in files if f.file_no == file_no), None)
        if file is None:
            if self._audit_logger:
                await self._audit_logger.log_file_not_found(
                    file_no=file_no,
                    user_id=user.id,
                    correlation_id=context.correlation_id,
                )
            raise FileNotFoundInRegistryError(file_no)

        statement = build_statement(file, context.today)

        if self._audit_logger:
            await self._audit_logger.log_statement_rendered(
                file_no=file_no,
                user_id=user.id,
                line_count=len(statement.rows),
                grand_balance=str(statement.totals.grand_balance),
                overdue_lines=sum(1 for r in statement.rows if r.is_overdue),
                correlation_id=context.correlation_id,
            )

        return statement


class DashboardFlow:
    """Builds the dashboard of a user's portfolio."""

    def __init__(
        self,
        registry: RegistryStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        currency_code: str = "PKR",
    ):
        self._registry = registry
        self._audit_logger = audit_logger
        self._currency_code = currency_code

    async def render(
        self,
        user: User,
        context: Optional[RenderContext] = None,
    ) -> DashboardView:
        """
        Derive cards, alerts, counters and notifications.

        A user with no files gets an empty view, not an error.
        """
        context = context or RenderContext()
        today = context.today

        files = await _visible_files(self._registry, user, self._audit_logger, context)
        alerts = portfolio_alerts(files, today)

        view = DashboardView(
            as_of=today,
            files=tuple(files),
            cards=tuple(file_card(f, today) for f in files),
            alerts=tuple(alerts),
            stats=portfolio_stats(files, alerts),
            notifications=tuple(
                build_notifications(alerts, user.id, today, self._currency_code)
            ),
        )

        if self._audit_logger:
            overdue = len(view.overdue_alerts)
            await self._audit_logger.log_dashboard_rendered(
                user_id=user.id,
                file_count=len(files),
                overdue=overdue,
                upcoming=len(alerts) - overdue,
                correlation_id=context.correlation_id,
            )

        return view


class AssistantFlow:
    """
    Portfolio summaries and chat for the assistant panel.

    The agents are optional: without AI configuration every request is
    answered with the fixed fallback text.
    """

    def __init__(
        self,
        registry: RegistryStoreInterface,
        summary_agent: Optional[PortfolioSummaryAgent] = None,
        chat_agent: Optional[RegistryChatAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._registry = registry
        self._summary_agent = summary_agent
        self._chat_agent = chat_agent
        self._audit_logger = audit_logger

    @property
    def is_configured(self) -> bool:
        return self._summary_agent is not None and self._chat_agent is not None

    async def summarize(
        self,
        user: User,
        context: Optional[RenderContext] = None,
    ) -> AgentReply:
        """Executive summary of the user's visible files."""
        context = context or RenderContext()
        files = await _visible_files(self._registry, user, self._audit_logger, context)

        if not files:
            reply = AgentReply(text=EMPTY_PORTFOLIO_SUMMARY)
        elif self._summary_agent is None:
            reply = AgentReply(
                text=SUMMARY_FALLBACK,
                used_fallback=True,
                error="AI service not configured",
            )
        else:
            reply = await self._summary_agent.generate_summary(user.name, user.role, files)

        await self._audit_reply("summary", reply, context)
        if self._audit_logger:
            await self._audit_logger.log_summary_generated(
                user_id=user.id,
                file_count=len(files),
                used_fallback=reply.used_fallback,
                correlation_id=context.correlation_id,
            )
        return reply

    async def chat(
        self,
        user: User,
        message: str,
        context: Optional[RenderContext] = None,
    ) -> AgentReply:
        """
        Answer a chat message with the user's role and visible files.

        Raises:
            ValueError: If the message is empty
        """
        if not message or not message.strip():
            raise ValueError("Message is required")

        context = context or RenderContext()
        files = await _visible_files(self._registry, user, self._audit_logger, context)

        if self._chat_agent is None:
            reply = AgentReply(
                text=CHAT_FALLBACK,
                used_fallback=True,
                error="AI service not configured",
            )
        else:
            reply = await self._chat_agent.answer(message, user.role, files)

        await self._audit_reply("chat", reply, context)
        if self._audit_logger:
            await self._audit_logger.log_chat_answered(
                user_id=user.id,
                role=user.role.value,
                used_fallback=reply.used_fallback,
                correlation_id=context.correlation_id,
            )
        return reply

    async def _audit_reply(
        self,
        operation: str,
        reply: AgentReply,
        context: RenderContext,
    ) -> None:
        if self._audit_logger and reply.error:
            await self._audit_logger.log_ai_service_failed(
                operation=operation,
                error_message=reply.error,
                correlation_id=context.correlation_id,
            )


class AppComponents(BaseModel):
    """Wired-up flows shared by the UI."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    registry: RegistryStoreInterface
    audit_storage: InMemoryAuditStorage
    statement_flow: StatementFlow
    dashboard_flow: DashboardFlow
    assistant_flow: AssistantFlow


def create_app_components(
    registry: Optional[RegistryStoreInterface] = None,
    use_ai: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        registry: Registry to serve. If None, the JSON export at
                  REGISTRY_DATA_PATH is loaded.
        use_ai: Whether to configure the Gemini agents.
                Set to False for running without an API key.
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    audit_storage = InMemoryAuditStorage()
    audit_logger = AuditLogger(audit_storage)

    if registry is None:
        data_path = settings.registry.data_path
        try:
            registry = InMemoryRegistryStore.from_json(data_path)
        except RegistryLoadError as e:
            # Registry unavailable - continue with an empty one
            registry = InMemoryRegistryStore()
            logger.error("registry_load_failed", error=str(e), path=data_path)
        else:
            logger.info(
                "registry_loaded",
                path=data_path,
                file_count=registry.file_count,
                user_count=registry.user_count,
            )

    summary_agent = None
    chat_agent = None
    if use_ai:
        try:
            summary_agent = PortfolioSummaryAgent()
            chat_agent = RegistryChatAgent()
        except Exception as e:
            # AI not configured - assistant answers with fallbacks
            logger.warning("ai_not_configured", error=str(e))
            summary_agent = None
            chat_agent = None

    return AppComponents(
        registry=registry,
        audit_storage=audit_storage,
        statement_flow=StatementFlow(registry, audit_logger),
        dashboard_flow=DashboardFlow(
            registry,
            audit_logger,
            currency_code=settings.ledger.currency_code,
        ),
        assistant_flow=AssistantFlow(
            registry,
            summary_agent=summary_agent,
            chat_agent=chat_agent,
            audit_logger=audit_logger,
        ),
    )
