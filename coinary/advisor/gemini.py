"""Personal finance advisor chat using the google-genai SDK."""
from datetime import datetime
from typing import List, Optional

from google import genai
from google.genai import types

from coinary.orchestrator.summary import SummaryOrchestrator
from coinary.reports.context import build_financial_context
from coinary.utils.exceptions import ConfigError, LLMError, RetryableLLMError, ValidationError
from coinary.utils.logger import get_logger
from coinary.utils.retry import retry_with_backoff

logger = get_logger()

ADVISOR_RULES = """You are a personal finance advisor. Follow these rules strictly:

1. Start by giving the user an overall balance of what they have spent.
2. Focus: only answer questions about personal money management.
3. Data: rely exclusively on the financial data provided.
4. Format: no bold, asterisks or markdown; clear structure with bullet points.
5. Recommendations: always give 3-5 actionable recommendations, ordered by
   potential impact, with concrete steps, each based on specific data.
6. Risky patterns: point out any risky pattern and explain its consequences.
7. Language: clear and direct, no complex financial jargon, empathetic but
   professional tone.
"""

CONTEXT_ACK = (
    "Understood. I will act as your personal finance advisor with clear, "
    "practical answers based on your data."
)


class FinancialAdvisor:
    """Chat advisor primed with the user's recent financial history."""

    def __init__(
        self,
        orchestrator: SummaryOrchestrator,
        api_key: Optional[str] = None,
        model_name: str = "gemini-2.5-flash",
        history_months: int = 6,
        client=None
    ):
        """
        Initialize the advisor.

        Args:
            orchestrator: Source of the monthly history
            api_key: Gemini API key, unused when client is given
            model_name: Gemini model to query
            history_months: Months of history in the context
            client: Preconfigured genai client
        """
        if client is None:
            if not api_key:
                raise ConfigError("Gemini API key is required (set GEMINI_API_KEY)")
            client = genai.Client(api_key=api_key)

        self.client = client
        self.orchestrator = orchestrator
        self.model_name = model_name
        self.history_months = history_months
        self.context: Optional[str] = None
        self.turns: List[types.Content] = []

        logger.info(f"Financial advisor initialized with {self.model_name}")

    @classmethod
    def from_settings(cls, orchestrator: SummaryOrchestrator, settings, client=None) -> "FinancialAdvisor":
        return cls(
            orchestrator,
            api_key=settings.gemini_api_key,
            model_name=settings.advisor_model_name,
            history_months=settings.advisor_history_months,
            client=client
        )

    def load_context(self, month: Optional[int] = None, year: Optional[int] = None) -> str:
        """Fetch the history window ending at month/year (default: now) and rebuild the context."""
        today = datetime.now()
        history = self.orchestrator.fetch_window(month or today.month, year or today.year, self.history_months)
        self.context = build_financial_context(history)
        self.turns = []
        logger.debug(f"Advisor context built from {len(history)} months")
        return self.context

    def ask(self, question: str) -> str:
        """Send a question and return the advisor's answer."""
        if not question or not question.strip():
            raise ValidationError("Question must not be empty")
        if self.context is None:
            self.load_context()

        question = question.strip()
        answer = self._generate(question)
        self.turns.append(types.Content(role="user", parts=[types.Part(text=question)]))
        self.turns.append(types.Content(role="model", parts=[types.Part(text=answer)]))
        return answer

    def _contents(self, question: str) -> List[types.Content]:
        return [
            types.Content(role="user", parts=[types.Part(text=self.context)]),
            types.Content(role="model", parts=[types.Part(text=CONTEXT_ACK)]),
            *self.turns,
            types.Content(role="user", parts=[types.Part(text=question)]),
        ]

    @retry_with_backoff(max_retries=3)
    def _generate(self, question: str) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=self._contents(question),
                config=types.GenerateContentConfig(system_instruction=ADVISOR_RULES)
            )
        except Exception as e:
            logger.error(f"Advisor request failed: {e}")
            raise RetryableLLMError(f"Advisor request failed: {e}")

        if not response.text:
            raise LLMError("Advisor returned an empty response")
        return response.text
