import datetime as dt
from typing import Dict, List, Literal

from pydantic import BaseModel, Field


BudgetState = Literal["good", "warning", "over"]


class BudgetStatus(BaseModel):
    status: BudgetState
    budget: float
    spent: float
    remaining: float
    percentage: float = Field(..., description="Spent as a percentage of the budget; 0 when no budget is set")


class DailyCost(BaseModel):
    day_id: str
    title: str
    date: dt.date
    cost: float
    activities: int


class CategoryCost(BaseModel):
    category: str
    cost: float
    percentage: float


class BudgetAlert(BaseModel):
    type: Literal["error", "warning", "info"]
    message: str


class BudgetSummary(BaseModel):
    total_cost: float
    activity_count: int
    status: BudgetStatus
    daily: List[DailyCost]
    categories: List[CategoryCost]
    category_counts: Dict[str, int]
    alerts: List[BudgetAlert]


class ItinerarySummary(BaseModel):
    """Read-only figures shown alongside a trip's itinerary."""

    total_cost: float
    activity_count: int
    category_breakdown: Dict[str, int]
