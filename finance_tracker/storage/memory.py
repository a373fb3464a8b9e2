import time
from datetime import datetime
from typing import Optional

from finance_tracker.core.dates import utcnow
from finance_tracker.schemas.auth import ProfileRecord, UserRecord
from finance_tracker.schemas.budget import ExpenseResponse
from finance_tracker.schemas.transaction import TransactionResponse
from finance_tracker.services.aggregator import RecordFilter, filter_records
from finance_tracker.storage.base import TRANSACTION_FIELDS, FinanceStore


class MemoryStore(FinanceStore):
    """Process-lifetime store used when no DATABASE_URL is configured."""

    backend = "memory"

    def __init__(self):
        self.users: list[UserRecord] = []
        self.profiles: dict[int, ProfileRecord] = {}
        self.budgets: dict[int, list[float]] = {}
        self.expenses: dict[int, list[ExpenseResponse]] = {}
        self.transactions: dict[int, list[TransactionResponse]] = {}
        self._last_id = 0

    def _next_id(self) -> int:
        # Millisecond clock ids, bumped so two writes in the same ms stay unique
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return self._last_id

    # --- Users ---
    async def create_user(self, first_name, last_name, email, password_hash) -> UserRecord:
        user = UserRecord(
            id=len(self.users) + 1,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password_hash,
        )
        self.users.append(user)
        return user

    async def get_user(self, user_id) -> Optional[UserRecord]:
        return next((u for u in self.users if u.id == user_id), None)

    async def get_user_by_email(self, email) -> Optional[UserRecord]:
        return next((u for u in self.users if u.email == email), None)

    async def update_user_names(self, user_id, first_name, last_name) -> Optional[UserRecord]:
        user = await self.get_user(user_id)
        if not user:
            return None
        if first_name:
            user.first_name = first_name
        if last_name:
            user.last_name = last_name
        return user

    async def get_profile(self, user_id) -> Optional[ProfileRecord]:
        return self.profiles.get(user_id)

    async def upsert_profile(self, user_id, profile: ProfileRecord) -> ProfileRecord:
        self.profiles[user_id] = profile
        return profile

    # --- Budget ---
    async def add_budget(self, user_id, total_budget) -> float:
        self.budgets.setdefault(user_id, []).append(total_budget)
        return total_budget

    async def latest_budget(self, user_id) -> float:
        history = self.budgets.get(user_id)
        return history[-1] if history else 0.0

    # --- Expenses ---
    async def list_expenses(self, user_id) -> list[ExpenseResponse]:
        items = self.expenses.get(user_id, [])
        return sorted(items, key=lambda e: (e.created_at, e.id), reverse=True)

    async def add_expense(self, user_id, label, category, amount, created_at=None) -> ExpenseResponse:
        item = ExpenseResponse(
            id=self._next_id(),
            label=label,
            category=category,
            amount=amount,
            created_at=created_at or utcnow(),
        )
        self.expenses.setdefault(user_id, []).append(item)
        return item

    async def delete_expense(self, user_id, expense_id) -> bool:
        items = self.expenses.get(user_id, [])
        kept = [e for e in items if e.id != expense_id]
        self.expenses[user_id] = kept
        return len(kept) != len(items)

    # --- Transactions ---
    async def list_transactions(self, user_id, flt: Optional[RecordFilter] = None) -> list[TransactionResponse]:
        items = sorted(self.transactions.get(user_id, []), key=lambda t: (t.occurred_at, t.id), reverse=True)
        return filter_records(items, flt)

    async def add_transaction(self, user_id, type, label, category, amount,
                              occurred_at: Optional[datetime] = None) -> TransactionResponse:
        item = TransactionResponse(
            id=self._next_id(),
            type=type,
            label=label,
            category=category,
            amount=amount,
            occurred_at=occurred_at or utcnow(),
        )
        self.transactions.setdefault(user_id, []).append(item)
        return item

    async def update_transaction(self, user_id, transaction_id, changes) -> Optional[TransactionResponse]:
        items = self.transactions.get(user_id, [])
        for i, item in enumerate(items):
            if item.id == transaction_id:
                update = {k: v for k, v in changes.items() if k in TRANSACTION_FIELDS}
                items[i] = TransactionResponse.model_validate({**item.model_dump(), **update})
                return items[i]
        return None

    async def delete_transaction(self, user_id, transaction_id) -> bool:
        items = self.transactions.get(user_id, [])
        kept = [t for t in items if t.id != transaction_id]
        self.transactions[user_id] = kept
        return len(kept) != len(items)
