from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

import pandas as pd

UNCATEGORIZED = "Uncategorized"
RECORD_COLUMNS = ["label", "category", "amount", "type", "ts"]

BUCKET_FORMATS = {
    "day": "%Y-%m-%d",
    "month": "%Y-%m",
    "year": "%Y",
}


def to_number(value) -> float:
    """Lenient numeric coercion: anything unparseable (or NaN) becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0


def _to_timestamp(value):
    if value is None or value == "":
        return pd.NaT
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return pd.NaT
    if ts is pd.NaT:
        return ts
    return ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")


def _as_dict(record) -> dict:
    if hasattr(record, "model_dump"):
        return record.model_dump()
    return dict(record)


@dataclass
class RecordFilter:
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    category: Optional[str] = None
    q: Optional[str] = None
    type: Optional[str] = None

    def is_empty(self) -> bool:
        return not any([self.date_from, self.date_to, self.category, self.q, self.type])


class RecordFrame:
    """
    Tabular view over expense/transaction records used for every read-side
    aggregation. Records may be dicts or pydantic models carrying
    label/category/amount/type and one of occurred_at/created_at/date.
    Expense rows without a type count as expenses.
    """

    def __init__(self, records: Optional[Iterable] = None, df: Optional[pd.DataFrame] = None):
        if df is not None:
            self.df = df
            return

        rows = []
        for record in records or []:
            data = _as_dict(record)
            rows.append({
                "label": data.get("label") or "",
                "category": data.get("category"),
                "amount": data.get("amount"),
                "type": data.get("type") or "expense",
                "ts": data.get("occurred_at") or data.get("created_at") or data.get("date"),
            })

        df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
        df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).astype(float)

        df["category"] = df["category"].where(df["category"].notna(), UNCATEGORIZED).astype(str)
        df.loc[df["category"].str.strip() == "", "category"] = UNCATEGORIZED

        df["ts"] = pd.to_datetime(df["ts"].map(_to_timestamp), utc=True)
        self.df = df

    def __len__(self):
        return len(self.df)

    @property
    def expenses(self) -> pd.DataFrame:
        return self.df[self.df["type"] == "expense"]

    def filter(self, flt: Optional[RecordFilter]) -> "RecordFrame":
        if flt is None or flt.is_empty():
            return self

        df = self.df
        mask = pd.Series(True, index=df.index)

        if flt.type:
            mask &= df["type"] == flt.type
        if flt.category:
            mask &= df["category"] == flt.category
        if flt.q:
            haystack = (df["label"].astype(str) + " " + df["category"]).str.lower()
            mask &= haystack.str.contains(flt.q.lower(), regex=False)
        if flt.date_from is not None:
            mask &= df["ts"] >= _to_timestamp(flt.date_from)
        if flt.date_to is not None:
            mask &= df["ts"] <= _to_timestamp(flt.date_to)

        return RecordFrame(df=df[mask.fillna(False)])

    def spent(self) -> float:
        return round(float(self.expenses["amount"].sum()), 2)

    def category_totals(self, expense_only: bool = True) -> list[dict]:
        df = self.expenses if expense_only else self.df
        if df.empty:
            return []

        totals = df.groupby("category")["amount"].sum().reset_index()
        totals = totals.sort_values(["amount", "category"], ascending=[False, True])
        return [
            {"category": row.category, "total": round(float(row.amount), 2)}
            for row in totals.itertuples(index=False)
        ]

    def top_categories(self, n: int) -> list[str]:
        return [c["category"] for c in self.category_totals()[:max(n, 0)]]

    def summary(self) -> dict:
        income = float(self.df.loc[self.df["type"] == "income", "amount"].sum())
        expenses = float(self.expenses["amount"].sum())
        return {
            "income": round(income, 2),
            "expenses": round(expenses, 2),
            "savings": round(income - expenses, 2),
        }

    def monthly_trend(self) -> list[dict]:
        df = self.df.dropna(subset=["ts"])
        if df.empty:
            return []

        df = df.assign(month=df["ts"].dt.strftime("%Y-%m"))
        is_income = df["type"] == "income"
        income = df[is_income].groupby("month")["amount"].sum()
        expenses = df[~is_income].groupby("month")["amount"].sum()

        months = sorted(set(income.index) | set(expenses.index))
        return [
            {
                "month": m,
                "income": round(float(income.get(m, 0.0)), 2),
                "expenses": round(float(expenses.get(m, 0.0)), 2),
            }
            for m in months
        ]

    def time_series(self, granularity: str = "day", top_n: int = 4) -> dict:
        if granularity not in BUCKET_FORMATS:
            raise ValueError(f"Unknown granularity: {granularity}")

        top = self.top_categories(top_n)
        df = self.expenses.dropna(subset=["ts"])
        if df.empty:
            return {"granularity": granularity, "top_categories": top, "buckets": []}

        df = df.assign(bucket=df["ts"].dt.strftime(BUCKET_FORMATS[granularity]))
        totals = df.groupby("bucket")["amount"].sum()
        by_cat = df[df["category"].isin(top)].groupby(["bucket", "category"])["amount"].sum()

        buckets = []
        for key in sorted(totals.index):
            buckets.append({
                "key": key,
                "total": round(float(totals[key]), 2),
                "categories": {c: round(float(by_cat.get((key, c), 0.0)), 2) for c in top},
            })

        return {"granularity": granularity, "top_categories": top, "buckets": buckets}


def budget_overview(total_budget, expenses: Iterable, flt: Optional[RecordFilter] = None) -> dict:
    total = to_number(total_budget)
    frame = RecordFrame(expenses).filter(flt)
    spent = frame.spent()
    return {
        "total_budget": total,
        "spent": spent,
        "remaining": round(max(0.0, total - spent), 2),
        "categories": frame.category_totals(),
    }


def filter_records(records: list, flt: Optional[RecordFilter]) -> list:
    """Apply a RecordFilter to raw records, keeping their original objects and order."""
    records = list(records or [])
    if flt is None or flt.is_empty() or not records:
        return records
    kept = RecordFrame(records).filter(flt).df.index
    return [records[i] for i in kept]
