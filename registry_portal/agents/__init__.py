"""AI Agents package."""

from registry_portal.agents.ai_agents import (
    CHAT_FALLBACK,
    EMPTY_PORTFOLIO_SUMMARY,
    SUMMARY_FALLBACK,
    AgentReply,
    PortfolioSummaryAgent,
    RegistryChatAgent,
    build_ai_context,
    build_line_context,
)

__all__ = [
    "CHAT_FALLBACK",
    "EMPTY_PORTFOLIO_SUMMARY",
    "SUMMARY_FALLBACK",
    "AgentReply",
    "PortfolioSummaryAgent",
    "RegistryChatAgent",
    "build_ai_context",
    "build_line_context",
]
