from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from finance_tracker.schemas.auth import ProfileRecord, UserRecord
from finance_tracker.schemas.budget import ExpenseResponse
from finance_tracker.schemas.transaction import TransactionResponse
from finance_tracker.services.aggregator import RecordFilter

# Fields a transaction update may touch
TRANSACTION_FIELDS = ("label", "category", "amount", "type", "occurred_at")


class FinanceStore(ABC):
    """
    Persistence for users, budgets, expenses and transactions. Every
    record-level call takes the owning user id and never sees other users'
    rows. Lists come back newest first.
    """

    backend: str = "abstract"

    async def init(self):
        pass

    async def close(self):
        pass

    # --- Users ---
    @abstractmethod
    async def create_user(self, first_name: str, last_name: str, email: str, password_hash: str) -> UserRecord: ...

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    @abstractmethod
    async def update_user_names(self, user_id: int, first_name: Optional[str],
                                last_name: Optional[str]) -> Optional[UserRecord]: ...

    @abstractmethod
    async def get_profile(self, user_id: int) -> Optional[ProfileRecord]: ...

    @abstractmethod
    async def upsert_profile(self, user_id: int, profile: ProfileRecord) -> ProfileRecord: ...

    # --- Budget ---
    @abstractmethod
    async def add_budget(self, user_id: int, total_budget: float) -> float: ...

    @abstractmethod
    async def latest_budget(self, user_id: int) -> float: ...

    # --- Expenses ---
    @abstractmethod
    async def list_expenses(self, user_id: int) -> list[ExpenseResponse]: ...

    @abstractmethod
    async def add_expense(self, user_id: int, label: str, category: Optional[str], amount: float,
                          created_at: Optional[datetime] = None) -> ExpenseResponse: ...

    @abstractmethod
    async def delete_expense(self, user_id: int, expense_id: int) -> bool: ...

    # --- Transactions ---
    @abstractmethod
    async def list_transactions(self, user_id: int,
                                flt: Optional[RecordFilter] = None) -> list[TransactionResponse]: ...

    @abstractmethod
    async def add_transaction(self, user_id: int, type: str, label: str, category: Optional[str],
                              amount: float, occurred_at: Optional[datetime] = None) -> TransactionResponse: ...

    @abstractmethod
    async def update_transaction(self, user_id: int, transaction_id: int,
                                 changes: dict) -> Optional[TransactionResponse]: ...

    @abstractmethod
    async def delete_transaction(self, user_id: int, transaction_id: int) -> bool: ...
