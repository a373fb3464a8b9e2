import logging
from typing import Iterable

from finance_tracker.ai.components.advisory import build_prompt, heuristic_advice
from finance_tracker.ai.loader import AILoader
from finance_tracker.config import settings
from finance_tracker.services.aggregator import budget_overview

logger = logging.getLogger(__name__)


class AIEngine:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(AIEngine, cls).__new__(cls)
        return cls._instance

    def _ask_gemini(self, prompt: str) -> str | None:
        model = AILoader.get_gemini()
        if not model:
            return None
        try:
            resp = model.generate_content(prompt)
            text = getattr(resp, "text", None)
            return text.strip() if text else None
        except Exception as e:
            logger.warning("Gemini suggestion error: %s", e)
            return None

    def _ask_openai(self, prompt: str) -> str | None:
        client = AILoader.get_openai()
        if not client:
            return None
        try:
            resp = client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": "You are a concise, practical finance advisor."},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.5,
            )
            text = resp.choices[0].message.content if resp.choices else None
            return text.strip() if text else None
        except Exception as e:
            logger.warning("OpenAI suggestion error: %s", e)
            return None

    def suggest(self, total_budget, expenses: Iterable) -> str:
        """Gemini first, then OpenAI, then the threshold heuristic. Never raises."""
        overview = budget_overview(total_budget, expenses or [])
        total, spent, categories = overview["total_budget"], overview["spent"], overview["categories"]

        prompt = build_prompt(total, spent, categories)
        for ask in (self._ask_gemini, self._ask_openai):
            text = ask(prompt)
            if text:
                return text

        return heuristic_advice(total, spent, categories)


ai_engine = AIEngine()
