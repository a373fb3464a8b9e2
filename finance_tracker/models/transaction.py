from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String
from finance_tracker.core.database import Base
from finance_tracker.core.dates import utcnow


class Transaction(Base):
    __tablename__ = "user_transactions"
    __table_args__ = (CheckConstraint("type IN ('income', 'expense')", name="ck_transaction_type"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    type = Column(String(10), nullable=False)
    label = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    occurred_at = Column(DateTime(timezone=True), index=True, default=utcnow)


class Expense(Base):
    __tablename__ = "user_expenses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    label = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    created_at = Column(DateTime(timezone=True), index=True, default=utcnow)


class Budget(Base):
    """One row per budget change; the newest row is the current budget."""
    __tablename__ = "user_budgets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    total_budget = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
