from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Union
from datetime import datetime

from finance_tracker.core.dates import ensure_utc
from finance_tracker.schemas.analytics import CategoryTotal


class BudgetSet(BaseModel):
    total_budget: Union[float, str, None] = Field(None, alias="totalBudget")

    model_config = ConfigDict(populate_by_name=True)


class BudgetUpdated(BaseModel):
    message: str = "Budget updated"
    total_budget: float = Field(..., alias="totalBudget")

    model_config = ConfigDict(populate_by_name=True)


class ExpenseCreate(BaseModel):
    label: Optional[str] = None
    category: Optional[str] = "General"
    amount: Optional[float] = None
    date: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: int
    label: str
    category: Optional[str] = None
    amount: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class BudgetState(BaseModel):
    total_budget: float = Field(..., alias="totalBudget")
    expenses: List[ExpenseResponse]

    model_config = ConfigDict(populate_by_name=True)


class BudgetOverview(BaseModel):
    total_budget: float = Field(..., alias="totalBudget")
    spent: float
    remaining: float
    categories: List[CategoryTotal]

    model_config = ConfigDict(populate_by_name=True)


class InsightResponse(BaseModel):
    total_budget: float = Field(..., alias="totalBudget")
    spent: float
    insight: str

    model_config = ConfigDict(populate_by_name=True)
