from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Union


class SuggestRequest(BaseModel):
    total_budget: Union[float, str, None] = Field(0, alias="totalBudget")
    expenses: List[Dict[str, Any]] = []

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {
            "totalBudget": 1500,
            "expenses": [
                {"label": "Rent", "category": "Housing", "amount": 800},
                {"label": "Groceries", "category": "Food", "amount": 240}
            ]
        }
    })


class SuggestResponse(BaseModel):
    suggestion: str
