from typing import Optional

UNDER_HALF_THRESHOLD = 0.5
WARNING_THRESHOLD = 0.85

NO_BUDGET_MESSAGE = "Set a valid total budget to get insights."
UNDER_HALF_MESSAGE = (
    "Good job! You're under 50% of your budget. Consider saving or investing the surplus."
)
SAFE_RANGE_MESSAGE = (
    "You're within a safe range. Monitor recurring categories like Food or Transport "
    "to optimize further."
)


def top_category(category_totals: list[dict]) -> Optional[str]:
    if not category_totals:
        return None
    best = max(category_totals, key=lambda c: c["total"])
    return best["category"]


def heuristic_advice(total_budget: float, spent: float, category_totals: list[dict]) -> str:
    if not total_budget or total_budget <= 0:
        return NO_BUDGET_MESSAGE

    pct = spent / total_budget
    if pct < UNDER_HALF_THRESHOLD:
        return UNDER_HALF_MESSAGE
    if pct < WARNING_THRESHOLD:
        return SAFE_RANGE_MESSAGE

    return (
        f"Warning: Spending is high ({round(pct * 100)}% of budget). "
        f"Biggest category: {top_category(category_totals) or 'N/A'}. "
        "Try setting a weekly cap or switching to lower-cost alternatives."
    )


def build_prompt(total_budget: float, spent: float, category_totals: list[dict]) -> str:
    lines = [
        "You are a personal finance assistant.",
        "Given the monthly total budget and the list of expenses (label, category, amount), "
        "provide 3-5 concise, actionable suggestions to optimize spending.",
        "Be practical, avoid generic fluff, and use the top spending categories if useful.",
        "",
        f"Total budget: {total_budget:g}",
        f"Total spent: {spent:g}",
        "Category totals:",
    ]
    lines += [f"- {c['category']}: {c['total']:g}" for c in category_totals]
    return "\n".join(lines)
