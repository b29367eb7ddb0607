from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator


def default_category_factory() -> str:
    return "activity"


class BaseConfigModel(BaseModel):
    model_config = {
        "extra": "forbid",
    }


class AppSettings(BaseConfigModel):
    name: str = Field(...)
    env: Literal["dev", "prod", "test"] = Field(...)
    version: str = Field(...)


class BudgetSettings(BaseConfigModel):
    warning_ratio: float = Field(0.8, gt=0.0, le=1.0, description="Share of the budget spent at which status turns to 'warning'.")
    low_remaining_ratio: float = Field(0.1, ge=0.0, lt=1.0, description="Remaining share of the budget below which a warning alert is raised.")
    expensive_activity_ratio: float = Field(0.2, gt=0.0, le=1.0, description="Share of the budget above which a single activity raises an info alert.")
    currency: str = Field("USD", min_length=3, max_length=3, description="ISO 4217 code used when formatting alert messages.")


class TripSettings(BaseConfigModel):
    min_name_length: int = Field(3, ge=1, description="Minimum length of a trip name after trimming.")
    copy_suffix: str = Field(" (Copy)", description="Suffix appended to the name of a copied public trip.")
    default_category: str = Field(default_factory=default_category_factory, description="Category assigned to activities created without one.")


class SearchSettings(BaseConfigModel):
    max_results: int = Field(50, gt=0, description="Upper bound on results returned by a single search.")


class Settings(BaseConfigModel):
    app: AppSettings = Field(...)
    budget: BudgetSettings = Field(default_factory=BudgetSettings)
    trips: TripSettings = Field(default_factory=TripSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)

    @model_validator(mode="after")
    def check_budget_thresholds(self) -> "Settings":
        if self.budget.low_remaining_ratio >= self.budget.warning_ratio:
            raise ValueError("budget.low_remaining_ratio must be lower than budget.warning_ratio")
        return self


__all__ = [
    "AppSettings",
    "BudgetSettings",
    "TripSettings",
    "SearchSettings",
    "Settings",
]
