"""
AI Agents for the Property Registry Portal

DESIGN DECISION: The AI service only ever narrates registry data.
It receives a narrow, typed projection of the user's files and returns
free text. It never computes balances or decides what is overdue;
the ledger engine does that deterministically.

CRITICAL BOUNDARIES:

1. PORTFOLIO SUMMARY AGENT:
   - CAN: Write a short executive summary of the files it is shown
   - CANNOT: See owner contact details, CNICs or raw ERP records
   - MUST: Fail open with a fixed message if the service is unavailable

2. REGISTRY CHAT AGENT:
   - CAN: Answer questions about the files in its context
   - ADMIN context: every file in the registry
   - CLIENT context: the user's own files and their ledger lines
   - MUST: Fail open with a fixed reply if the service is unavailable
"""

import json
from typing import Any, Optional, Sequence

import google.generativeai as genai
from pydantic import BaseModel, Field
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from registry_portal.config import get_settings
from registry_portal.ledger import group_transactions
from registry_portal.models.ledger import PropertyFile
from registry_portal.models.portal import FileSnapshot, LineSnapshot, UserRole

SUMMARY_FALLBACK = "Analysis suspended. Registry synchronization required."
EMPTY_PORTFOLIO_SUMMARY = "No active property files found in your registry profile."
CHAT_FALLBACK = (
    "The registry assistant is unavailable right now. "
    "Please try again shortly or contact the registry office."
)


class AgentReply(BaseModel):
    """
    Text produced for the user, and whether it came from the model.

    When the service fails, `text` holds the fixed fallback and `error`
    the reason, so the caller can audit it.
    """

    text: str
    used_fallback: bool = False
    error: Optional[str] = Field(
        default=None,
        description="Why the fallback was used"
    )


def build_ai_context(files: Sequence[PropertyFile]) -> list[FileSnapshot]:
    """Project files onto the fields the AI service is allowed to see."""
    return [FileSnapshot.from_file(f) for f in files]


def build_line_context(files: Sequence[PropertyFile]) -> list[LineSnapshot]:
    """Ledger lines of each file, in statement order."""
    lines = []
    for file in files:
        grouped = group_transactions(file.transactions)
        for t in grouped.payment_plan + grouped.other:
            lines.append(LineSnapshot.from_transaction(file.file_no, t))
    return lines


def _to_json(items: Sequence[BaseModel]) -> str:
    return json.dumps([item.model_dump(by_alias=True) for item in items])


class _GeminiAgent:
    """Shared model setup and retrying call for the registry agents."""

    max_output_tokens = 1024

    def __init__(
        self,
        model: Optional[Any] = None,
        max_attempts: int = 2,
    ):
        """
        Args:
            model: Anything with an async `generate_content_async(prompt)`.
                   If None, a Gemini model is configured from settings.
            max_attempts: Calls to the model before falling back.
        """
        self._max_attempts = max_attempts
        if model is not None:
            self._model = model
        else:
            self._settings = get_settings().gemini
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": min(self.max_output_tokens, self._settings.max_tokens),
            }
        )

    async def _generate(self, prompt: str) -> str:
        """Call the model, retrying transient failures."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            reraise=True,
        ):
            with attempt:
                response = await self._model.generate_content_async(prompt)
                text = (response.text or "").strip()
                if not text:
                    raise ValueError("Empty response from AI service")
                return text


class PortfolioSummaryAgent(_GeminiAgent):
    """
    Writes the three-sentence executive summary on the dashboard.

    RESPONSIBILITIES:
    - Serialize the FileSnapshot projection as the prompt's data block
    - Strip markdown styling the model adds despite instructions

    BOUNDARIES:
    - NEVER raises on service errors
    - NEVER sees transaction-level data
    """

    max_output_tokens = 512

    def build_prompt(
        self,
        user_name: str,
        role: UserRole,
        files: Sequence[PropertyFile],
    ) -> str:
        context = _to_json(build_ai_context(files))
        return f"""Analyze this real estate portfolio for {user_name} ({role.value}).
REGISTRY DATA: {context}

TASK: Provide a 3-sentence high-level executive summary.
Focus on financial health, upcoming milestones, and collection status.
STRICT RULE: NO BOLDING, NO STARS, NO MARKDOWN STYLING.
Tone: Senior Financial Auditor."""

    async def generate_summary(
        self,
        user_name: str,
        role: UserRole,
        files: Sequence[PropertyFile],
    ) -> AgentReply:
        """
        Summarize a portfolio.

        An empty portfolio is answered locally without calling the model.
        """
        if not files:
            return AgentReply(text=EMPTY_PORTFOLIO_SUMMARY)

        prompt = self.build_prompt(user_name, role, files)
        try:
            text = await self._generate(prompt)
        except Exception as e:
            return AgentReply(text=SUMMARY_FALLBACK, used_fallback=True, error=str(e))

        return AgentReply(text=text.replace("*", "").strip())


class RegistryChatAgent(_GeminiAgent):
    """
    Answers questions about the registry in the assistant panel.

    The system instruction depends on the role: admins get a global
    supervisor with an owner-level table layout, clients a private
    ledger auditor with a line-level layout.
    """

    def build_instruction(
        self,
        role: UserRole,
        files: Sequence[PropertyFile],
    ) -> str:
        if role == UserRole.ADMIN:
            context = _to_json(build_ai_context(files))
            role_rules = """You are the Global Portfolio Supervisor.
- You have access to ALL property files in the registry.
- You can audit collections, identify trends and list defaults across all clients.
- Always include owner names in your tables.
- Table columns: | OWNER | FILE ID | SIZE | DUE DATE | OVERDUE (PKR) |"""
        else:
            context = json.dumps({
                "files": [s.model_dump(by_alias=True) for s in build_ai_context(files)],
                "lines": [s.model_dump(by_alias=True) for s in build_line_context(files)],
            })
            role_rules = """You are a Private Ledger Auditor.
- You only see this user's own property files.
- Explain installments, upcoming due dates and payment history.
- Table columns: | DESCRIPTION | DUE DATE | PAYABLE (PKR) | PAID (PKR) | BALANCE (PKR) |"""

        return f"""You are the DIN Properties Secure Registry Assistant.
CURRENT USER ROLE: {role.value}

{role_rules}

STRICT FORMATTING:
1. Use ALL CAPS for headers.
2. NO STARS (**) or BOLDING.
3. Use Markdown tables for financial data.

DATA CONTEXT: {context}"""

    async def answer(
        self,
        message: str,
        role: UserRole,
        files: Sequence[PropertyFile],
    ) -> AgentReply:
        """
        Answer a chat message.

        Raises:
            ValueError: If the message is empty
        """
        if not message or not message.strip():
            raise ValueError("Message is required")

        prompt = f"{self.build_instruction(role, files)}\n\nUser message: {message.strip()}"
        try:
            text = await self._generate(prompt)
        except Exception as e:
            return AgentReply(text=CHAT_FALLBACK, used_fallback=True, error=str(e))

        return AgentReply(text=text)
