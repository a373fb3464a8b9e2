from typing import Optional

from fastapi import HTTPException, Query, Request

from finance_tracker.core.dates import parse_range_bound
from finance_tracker.schemas.transaction import TRANSACTION_TYPES
from finance_tracker.services.aggregator import RecordFilter
from finance_tracker.storage.base import FinanceStore


def get_store(request: Request) -> FinanceStore:
    return request.app.state.store


def record_filter(
        date_from: Optional[str] = Query(None, alias="from", examples=["2024-01-01"]),
        date_to: Optional[str] = Query(None, alias="to", examples=["2024-03-31"]),
        category: Optional[str] = Query(None),
        q: Optional[str] = Query(None, description="Case-insensitive search over label and category"),
        type: Optional[str] = Query(None, description="income or expense; other values are ignored"),
) -> RecordFilter:
    try:
        start = parse_range_bound(date_from)
        end = parse_range_bound(date_to, end=True)
    except (ValueError, OverflowError):
        raise HTTPException(status_code=400, detail="Invalid date range")

    return RecordFilter(
        date_from=start,
        date_to=end,
        category=category or None,
        q=q or None,
        type=type if type in TRANSACTION_TYPES else None,
    )
