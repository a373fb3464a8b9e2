import re
from datetime import datetime, timezone
from typing import Optional

from finance_tracker.schemas.transaction import TransactionProposal

DEFAULT_CATEGORY = "General"

AMOUNT_RE = re.compile(r"([+-]?\$?\d+(?:\.\d{1,2})?)")

EXPENSE_CUES = ("spent", "paid", "buy", "bought", "expense", "minus", "withdraw")
INCOME_CUES = ("income", "salary", "earned", "deposit", "plus", "credit", "received")

# Order matters: the first group with a hit wins.
CATEGORY_RULES = [
    ("Food", ["food", "grocery", "groceries", "lunch", "dinner", "restaurant", "coffee"]),
    ("Transport", ["transport", "uber", "bus", "train", "fuel", "gas", "petrol", "taxi"]),
    ("Housing", ["rent", "mortgage", "utilities", "electric", "water", "internet"]),
    ("Income", ["salary", "paycheck", "bonus", "freelance", "client", "invoice"]),
    ("Shopping", ["shopping", "clothes", "amazon", "store"]),
    ("Electronics", [
        "electronics", "phone", "laptop", "watch", "tablet", "headphones", "camera",
        "tv", "television", "samsung", "apple", "sony", "xiaomi", "pixel", "oneplus",
    ]),
]


# Short stems that open too many unrelated words ("business", "busy") match whole.
WHOLE_WORD_KEYWORDS = {"bus", "tv"}


def _keyword_pattern(words) -> re.Pattern:
    # Keywords are stems matched at the start of a word: "electricity", "gasoline",
    # "coffeeshop" and "withdrawal" all hit.
    alternatives = [
        re.escape(w) + (r"(?:es|s)?\b" if w in WHOLE_WORD_KEYWORDS else r"\w*")
        for w in words
    ]
    return re.compile(r"\b(?:" + "|".join(alternatives) + ")")


_EXPENSE_RE = _keyword_pattern(EXPENSE_CUES)
_INCOME_RE = _keyword_pattern(INCOME_CUES)
_CATEGORY_PATTERNS = [(name, _keyword_pattern(words)) for name, words in CATEGORY_RULES]


def categorize(text: str) -> str:
    lower = (text or "").lower()
    for name, pattern in _CATEGORY_PATTERNS:
        if pattern.search(lower):
            return name
    return DEFAULT_CATEGORY


def infer_type(lower: str, value: float, token: str) -> str:
    if value < 0 or _EXPENSE_RE.search(lower):
        return "expense"
    if value > 0 and (_INCOME_RE.search(lower) or token.startswith("+")):
        return "income"
    return "expense"


def parse_transaction_text(text, now: Optional[datetime] = None) -> Optional[TransactionProposal]:
    """
    Turn a free-text note ("spent 20 on lunch", "+200 freelance") into a
    transaction proposal. Returns None when the text carries no amount.
    """
    if not text or not isinstance(text, str):
        return None

    lower = text.lower()
    match = AMOUNT_RE.search(lower)
    if not match:
        return None

    token = match.group(1)
    value = float(token.replace("$", ""))

    return TransactionProposal(
        label=text.strip(),
        category=categorize(lower),
        amount=abs(value),
        type=infer_type(lower, value, token),
        occurred_at=now or datetime.now(timezone.utc),
    )
