from types import SimpleNamespace

import pytest

from finance_tracker.ai.components.advisory import (
    NO_BUDGET_MESSAGE, SAFE_RANGE_MESSAGE, UNDER_HALF_MESSAGE, build_prompt, heuristic_advice, top_category,
)
from finance_tracker.ai.engine import AIEngine
from finance_tracker.ai.loader import AILoader

FOOD_HEAVY = [{"category": "Food", "total": 600}, {"category": "Transport", "total": 250}]


@pytest.mark.parametrize("total", [0, -100, None])
def test_no_valid_budget(total):
    assert heuristic_advice(total, 50, FOOD_HEAVY) == NO_BUDGET_MESSAGE


def test_under_half():
    assert heuristic_advice(1000, 499, FOOD_HEAVY) == UNDER_HALF_MESSAGE


def test_exactly_half_is_safe_range():
    assert heuristic_advice(1000, 500, FOOD_HEAVY) == SAFE_RANGE_MESSAGE


def test_exactly_warning_threshold_warns():
    advice = heuristic_advice(1000, 850, FOOD_HEAVY)
    assert advice.startswith("Warning")
    assert "85%" in advice
    assert "Biggest category: Food" in advice


def test_overspent_warning_without_categories():
    advice = heuristic_advice(100, 250, [])
    assert "250%" in advice
    assert "Biggest category: N/A" in advice


def test_top_category():
    assert top_category(FOOD_HEAVY) == "Food"
    assert top_category([]) is None


def test_prompt_lists_category_totals():
    prompt = build_prompt(1500, 850, FOOD_HEAVY)
    assert "Total budget: 1500" in prompt
    assert "- Food: 600" in prompt


class FailingGemini:
    def generate_content(self, prompt):
        raise RuntimeError("quota exceeded")


class EmptyGemini:
    def generate_content(self, prompt):
        return SimpleNamespace(text="   ")


class CannedOpenAI:
    def __init__(self, text):
        self.calls = []

        def create(**kwargs):
            self.calls.append(kwargs)
            return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])

        self.chat = SimpleNamespace(completions=SimpleNamespace(create=create))


@pytest.fixture
def providers(monkeypatch):
    monkeypatch.setattr(AILoader, "gemini_model", None)
    monkeypatch.setattr(AILoader, "openai_client", None)
    return monkeypatch


EXPENSES = [{"label": "Rent", "category": "Housing", "amount": 900}]


def test_engine_without_providers_uses_heuristic(providers):
    assert AIEngine().suggest(1000, EXPENSES) == heuristic_advice(
        1000, 900, [{"category": "Housing", "total": 900}]
    )


def test_engine_is_singleton():
    assert AIEngine() is AIEngine()


def test_engine_falls_through_failing_gemini_to_openai(providers):
    client = CannedOpenAI("  Cook at home twice a week.  ")
    providers.setattr(AILoader, "gemini_model", FailingGemini())
    providers.setattr(AILoader, "openai_client", client)

    assert AIEngine().suggest(1000, EXPENSES) == "Cook at home twice a week."
    assert client.calls[0]["temperature"] == 0.5


def test_engine_ignores_empty_provider_text(providers):
    providers.setattr(AILoader, "gemini_model", EmptyGemini())
    providers.setattr(AILoader, "openai_client", CannedOpenAI(None))

    assert AIEngine().suggest(0, EXPENSES) == NO_BUDGET_MESSAGE


def test_engine_tolerates_malformed_expenses(providers):
    advice = AIEngine().suggest("2000", [{"amount": "oops"}, {"label": "x"}])
    assert advice == UNDER_HALF_MESSAGE
