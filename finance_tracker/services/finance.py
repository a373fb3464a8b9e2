import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError

from finance_tracker.ai.engine import ai_engine
from finance_tracker.config import settings
from finance_tracker.core.dates import parse_client_date
from finance_tracker.core.exceptions import ApiError
from finance_tracker.schemas.analytics import SeriesResponse, SummaryResponse, TrendPoint, CategoryTotal
from finance_tracker.schemas.budget import (
    BudgetOverview, BudgetState, BudgetUpdated, ExpenseCreate, ExpenseResponse, InsightResponse,
)
from finance_tracker.schemas.transaction import (
    TRANSACTION_TYPES, TransactionCreate, TransactionProposal, TransactionResponse, TransactionUpdate,
)
from finance_tracker.services.aggregator import (
    RecordFilter, RecordFrame, budget_overview, filter_records, to_number,
)
from finance_tracker.services.classifier import DEFAULT_CATEGORY, parse_transaction_text
from finance_tracker.storage.base import FinanceStore

logger = logging.getLogger(__name__)


def _valid_amount(amount) -> bool:
    return amount is not None and amount == amount and amount > 0


class FinanceService:
    # --- Budget & expenses ---
    @staticmethod
    async def get_budget_state(store: FinanceStore, user_id: int) -> BudgetState:
        total = await store.latest_budget(user_id)
        expenses = await store.list_expenses(user_id)
        return BudgetState(total_budget=total, expenses=expenses)

    @staticmethod
    async def set_budget(store: FinanceStore, user_id: int, raw_value) -> BudgetUpdated:
        value = to_number(raw_value)
        await store.add_budget(user_id, value)
        return BudgetUpdated(total_budget=value)

    @staticmethod
    async def add_expense(store: FinanceStore, user_id: int, payload: ExpenseCreate) -> ExpenseResponse:
        if not payload.label or not _valid_amount(payload.amount):
            raise ApiError(400, "Invalid expense payload")

        return await store.add_expense(
            user_id,
            payload.label,
            payload.category or DEFAULT_CATEGORY,
            payload.amount,
            created_at=parse_client_date(payload.date),
        )

    @staticmethod
    async def list_expenses(store: FinanceStore, user_id: int, flt: Optional[RecordFilter] = None):
        return filter_records(await store.list_expenses(user_id), flt)

    @staticmethod
    async def delete_expense(store: FinanceStore, user_id: int, expense_id: int):
        await store.delete_expense(user_id, expense_id)

    @staticmethod
    async def get_budget_overview(store: FinanceStore, user_id: int,
                                  flt: Optional[RecordFilter] = None) -> BudgetOverview:
        total = await store.latest_budget(user_id)
        expenses = await store.list_expenses(user_id)
        return BudgetOverview(**budget_overview(total, expenses, flt))

    # --- Advisory ---
    @staticmethod
    async def suggest(total_budget, expenses) -> str:
        # Provider SDKs block; keep them off the event loop
        return await run_in_threadpool(ai_engine.suggest, total_budget, expenses)

    @staticmethod
    async def get_insight(store: FinanceStore, user_id: int) -> InsightResponse:
        try:
            total = await store.latest_budget(user_id)
            expenses = await store.list_expenses(user_id)
        except SQLAlchemyError:
            logger.exception("Insight: store unavailable, falling back to an empty budget")
            total, expenses = 0.0, []

        spent = RecordFrame(expenses).spent()
        insight = await FinanceService.suggest(total, expenses)
        return InsightResponse(total_budget=total, spent=spent, insight=insight)

    # --- Transactions ---
    @staticmethod
    def parse_text(text: Optional[str]) -> Optional[TransactionProposal]:
        return parse_transaction_text(text or "")

    @staticmethod
    async def create_transaction(store: FinanceStore, user_id: int,
                                 payload: TransactionCreate) -> TransactionResponse:
        if not payload.label or not _valid_amount(payload.amount):
            raise ApiError(400, "Invalid transaction payload")
        trx_type = payload.type or "expense"
        if trx_type not in TRANSACTION_TYPES:
            raise ApiError(400, "Invalid type")

        return await store.add_transaction(
            user_id,
            trx_type,
            payload.label,
            payload.category or DEFAULT_CATEGORY,
            payload.amount,
            occurred_at=parse_client_date(payload.date),
        )

    @staticmethod
    async def list_transactions(store: FinanceStore, user_id: int,
                                flt: Optional[RecordFilter] = None) -> list[TransactionResponse]:
        return await store.list_transactions(user_id, flt)

    @staticmethod
    async def update_transaction(store: FinanceStore, user_id: int, transaction_id: int,
                                 payload: TransactionUpdate) -> TransactionResponse:
        fields = payload.model_dump(exclude_unset=True)
        changes = {}

        if "label" in fields:
            if not payload.label:
                raise ApiError(400, "Invalid transaction payload")
            changes["label"] = payload.label
        if "category" in fields:
            changes["category"] = payload.category or DEFAULT_CATEGORY
        if "amount" in fields:
            if not _valid_amount(payload.amount):
                raise ApiError(400, "Invalid transaction payload")
            changes["amount"] = payload.amount
        if "type" in fields:
            if payload.type not in TRANSACTION_TYPES:
                raise ApiError(400, "Invalid type")
            changes["type"] = payload.type
        if "date" in fields:
            occurred_at = parse_client_date(payload.date)
            if occurred_at:
                changes["occurred_at"] = occurred_at

        if not changes:
            raise ApiError(400, "No valid fields to update")

        updated = await store.update_transaction(user_id, transaction_id, changes)
        if updated is None:
            raise ApiError(404, "Not found")
        return updated

    @staticmethod
    async def delete_transaction(store: FinanceStore, user_id: int, transaction_id: int):
        await store.delete_transaction(user_id, transaction_id)

    # --- Analytics ---
    @staticmethod
    async def _transaction_frame(store: FinanceStore, user_id: int, flt: Optional[RecordFilter]) -> RecordFrame:
        return RecordFrame(await store.list_transactions(user_id, flt))

    @staticmethod
    async def get_summary(store: FinanceStore, user_id: int,
                          flt: Optional[RecordFilter] = None) -> SummaryResponse:
        frame = await FinanceService._transaction_frame(store, user_id, flt)
        return SummaryResponse(**frame.summary())

    @staticmethod
    async def get_category_totals(store: FinanceStore, user_id: int,
                                  flt: Optional[RecordFilter] = None) -> list[CategoryTotal]:
        frame = await FinanceService._transaction_frame(store, user_id, flt)
        return [CategoryTotal(**c) for c in frame.category_totals()]

    @staticmethod
    async def get_trends(store: FinanceStore, user_id: int,
                         flt: Optional[RecordFilter] = None) -> list[TrendPoint]:
        frame = await FinanceService._transaction_frame(store, user_id, flt)
        return [TrendPoint(**p) for p in frame.monthly_trend()]

    @staticmethod
    async def get_series(store: FinanceStore, user_id: int, granularity: str,
                         flt: Optional[RecordFilter] = None, top_n: Optional[int] = None,
                         source: str = "transactions") -> SeriesResponse:
        if source == "expenses":
            frame = RecordFrame(await store.list_expenses(user_id)).filter(flt)
        else:
            frame = await FinanceService._transaction_frame(store, user_id, flt)
        n = settings.TOP_CATEGORIES if top_n is None else top_n
        return SeriesResponse(**frame.time_series(granularity, n))
