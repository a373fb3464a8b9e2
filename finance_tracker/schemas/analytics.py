from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Literal

Granularity = Literal["day", "month", "year"]


class CategoryTotal(BaseModel):
    category: str
    total: float


class SummaryResponse(BaseModel):
    income: float
    expenses: float
    savings: float

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "income": 3200.0,
            "expenses": 2150.5,
            "savings": 1049.5
        }
    })


class TrendPoint(BaseModel):
    month: str
    income: float
    expenses: float


class SeriesBucket(BaseModel):
    key: str
    total: float
    categories: Dict[str, float]


class SeriesResponse(BaseModel):
    granularity: Granularity
    top_categories: List[str]
    buckets: List[SeriesBucket]
