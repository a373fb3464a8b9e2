import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, case, delete, desc, func, select

from finance_tracker.core.database import create_engine_and_session, init_db
from finance_tracker.models.transaction import Budget, Expense, Transaction
from finance_tracker.models.user import User, UserProfile
from finance_tracker.schemas.auth import ProfileRecord, UserRecord
from finance_tracker.schemas.budget import ExpenseResponse
from finance_tracker.schemas.transaction import TransactionResponse
from finance_tracker.services.aggregator import UNCATEGORIZED, RecordFilter
from finance_tracker.storage.base import TRANSACTION_FIELDS, FinanceStore

logger = logging.getLogger(__name__)


class SqlStore(FinanceStore):
    backend = "sql"

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine, self.session_factory = create_engine_and_session(database_url)

    async def init(self):
        await init_db(self.engine)
        logger.info("Schema ready on %s", self.engine.url.render_as_string(hide_password=True))

    async def close(self):
        await self.engine.dispose()

    # --- Users ---
    async def create_user(self, first_name, last_name, email, password_hash) -> UserRecord:
        async with self.session_factory() as db:
            user = User(first_name=first_name, last_name=last_name, email=email, password=password_hash)
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return UserRecord.model_validate(user)

    async def get_user(self, user_id) -> Optional[UserRecord]:
        async with self.session_factory() as db:
            user = await db.get(User, user_id)
            return UserRecord.model_validate(user) if user else None

    async def get_user_by_email(self, email) -> Optional[UserRecord]:
        async with self.session_factory() as db:
            res = await db.execute(select(User).where(User.email == email))
            user = res.scalar_one_or_none()
            return UserRecord.model_validate(user) if user else None

    async def update_user_names(self, user_id, first_name, last_name) -> Optional[UserRecord]:
        async with self.session_factory() as db:
            user = await db.get(User, user_id)
            if not user:
                return None
            if first_name:
                user.first_name = first_name
            if last_name:
                user.last_name = last_name
            await db.commit()
            await db.refresh(user)
            return UserRecord.model_validate(user)

    async def get_profile(self, user_id) -> Optional[ProfileRecord]:
        async with self.session_factory() as db:
            profile = await db.get(UserProfile, user_id)
            return ProfileRecord.model_validate(profile) if profile else None

    async def upsert_profile(self, user_id, profile: ProfileRecord) -> ProfileRecord:
        async with self.session_factory() as db:
            row = await db.get(UserProfile, user_id)
            if row is None:
                row = UserProfile(user_id=user_id)
                db.add(row)
            row.phone = profile.phone
            row.company = profile.company
            row.bio = profile.bio
            row.profile_photo = profile.profile_photo
            await db.commit()
            await db.refresh(row)
            return ProfileRecord.model_validate(row)

    # --- Budget ---
    async def add_budget(self, user_id, total_budget) -> float:
        async with self.session_factory() as db:
            db.add(Budget(user_id=user_id, total_budget=total_budget))
            await db.commit()
            return total_budget

    async def latest_budget(self, user_id) -> float:
        async with self.session_factory() as db:
            query = (
                select(Budget.total_budget)
                .where(Budget.user_id == user_id)
                .order_by(desc(Budget.id))
                .limit(1)
            )
            res = await db.execute(query)
            return float(res.scalar() or 0.0)

    # --- Expenses ---
    async def list_expenses(self, user_id) -> list[ExpenseResponse]:
        async with self.session_factory() as db:
            query = (
                select(Expense)
                .where(Expense.user_id == user_id)
                .order_by(desc(Expense.created_at), desc(Expense.id))
            )
            res = await db.execute(query)
            return [ExpenseResponse.model_validate(e) for e in res.scalars().all()]

    async def add_expense(self, user_id, label, category, amount, created_at=None) -> ExpenseResponse:
        async with self.session_factory() as db:
            expense = Expense(user_id=user_id, label=label, category=category, amount=amount)
            if created_at:
                expense.created_at = created_at
            db.add(expense)
            await db.commit()
            await db.refresh(expense)
            return ExpenseResponse.model_validate(expense)

    async def delete_expense(self, user_id, expense_id) -> bool:
        async with self.session_factory() as db:
            res = await db.execute(
                delete(Expense).where(and_(Expense.user_id == user_id, Expense.id == expense_id))
            )
            await db.commit()
            return res.rowcount > 0

    # --- Transactions ---
    async def list_transactions(self, user_id, flt: Optional[RecordFilter] = None) -> list[TransactionResponse]:
        conditions = [Transaction.user_id == user_id]
        # Blank and NULL categories both read as Uncategorized
        category = case(
            (func.trim(Transaction.category) == "", UNCATEGORIZED),
            else_=func.coalesce(Transaction.category, UNCATEGORIZED),
        )

        if flt is not None:
            if flt.type:
                conditions.append(Transaction.type == flt.type)
            if flt.category:
                conditions.append(category == flt.category)
            if flt.date_from is not None:
                conditions.append(Transaction.occurred_at >= flt.date_from)
            if flt.date_to is not None:
                conditions.append(Transaction.occurred_at <= flt.date_to)
            if flt.q:
                haystack = func.lower(Transaction.label + " " + category)
                conditions.append(haystack.contains(flt.q.lower(), autoescape=True))

        query = (
            select(Transaction)
            .where(and_(*conditions))
            .order_by(desc(Transaction.occurred_at), desc(Transaction.id))
        )
        async with self.session_factory() as db:
            res = await db.execute(query)
            return [TransactionResponse.model_validate(t) for t in res.scalars().all()]

    async def add_transaction(self, user_id, type, label, category, amount,
                              occurred_at: Optional[datetime] = None) -> TransactionResponse:
        async with self.session_factory() as db:
            trx = Transaction(user_id=user_id, type=type, label=label, category=category, amount=amount)
            if occurred_at:
                trx.occurred_at = occurred_at
            db.add(trx)
            await db.commit()
            await db.refresh(trx)
            return TransactionResponse.model_validate(trx)

    async def update_transaction(self, user_id, transaction_id, changes) -> Optional[TransactionResponse]:
        async with self.session_factory() as db:
            query = select(Transaction).where(
                and_(Transaction.user_id == user_id, Transaction.id == transaction_id)
            )
            res = await db.execute(query)
            trx = res.scalar_one_or_none()
            if not trx:
                return None

            for field, value in changes.items():
                if field in TRANSACTION_FIELDS:
                    setattr(trx, field, value)

            await db.commit()
            await db.refresh(trx)
            return TransactionResponse.model_validate(trx)

    async def delete_transaction(self, user_id, transaction_id) -> bool:
        async with self.session_factory() as db:
            res = await db.execute(
                delete(Transaction).where(
                    and_(Transaction.user_id == user_id, Transaction.id == transaction_id)
                )
            )
            await db.commit()
            return res.rowcount > 0
