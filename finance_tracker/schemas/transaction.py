from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

from finance_tracker.core.dates import ensure_utc

TransactionType = Literal["income", "expense"]
TRANSACTION_TYPES = ("income", "expense")


class TransactionProposal(BaseModel):
    label: str
    category: str
    amount: float = Field(..., ge=0)
    type: TransactionType
    occurred_at: datetime


class ParseRequest(BaseModel):
    text: Optional[str] = None


class TransactionCreate(BaseModel):
    label: Optional[str] = None
    category: Optional[str] = "General"
    amount: Optional[float] = None
    type: Optional[str] = "expense"
    date: Optional[str] = None


class TransactionUpdate(BaseModel):
    label: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[float] = None
    type: Optional[str] = None
    date: Optional[str] = None


class TransactionResponse(BaseModel):
    id: int
    type: TransactionType
    label: str
    category: Optional[str] = None
    amount: float
    occurred_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("occurred_at")
    @classmethod
    def occurred_at_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
