"""
Derived figures over a trip's itinerary: costs, counts, and budget status.

All functions are pure and take the days already loaded for a trip.
"""

from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence

from globetrotter.config.config_models import BudgetSettings
from globetrotter.models.budget import (
    BudgetAlert,
    BudgetStatus,
    BudgetSummary,
    CategoryCost,
    DailyCost,
    ItinerarySummary,
)
from globetrotter.models.itinerary import ItineraryDay
from globetrotter.utils.formatting import format_currency


def day_cost(day: ItineraryDay) -> float:
    return sum(activity.cost_value for activity in day.activities)


def total_cost(days: Sequence[ItineraryDay]) -> float:
    """Sum of every activity cost; a missing cost counts as 0."""
    return sum(day_cost(day) for day in days)


def activity_count(days: Sequence[ItineraryDay]) -> int:
    return sum(len(day.activities) for day in days)


def category_breakdown(days: Sequence[ItineraryDay]) -> Dict[str, int]:
    """Number of activities per category; uncategorised ones count as 'activity'."""
    counts: Counter = Counter()
    for day in days:
        for activity in day.activities:
            counts[activity.category_label] += 1
    return dict(counts)


def cost_breakdown(days: Sequence[ItineraryDay]) -> Dict[str, float]:
    """Summed cost per lower-cased category."""
    breakdown: Dict[str, float] = defaultdict(float)
    for day in days:
        for activity in day.activities:
            breakdown[activity.category_label.lower()] += activity.cost_value
    return dict(breakdown)


def daily_costs(days: Sequence[ItineraryDay]) -> List[DailyCost]:
    return [
        DailyCost(
            day_id=day.id,
            title=day.title,
            date=day.date,
            cost=day_cost(day),
            activities=len(day.activities),
        )
        for day in days
    ]


def category_costs(days: Sequence[ItineraryDay]) -> List[CategoryCost]:
    """Cost per category with its share of the trip total, in first-seen order."""
    costs: Dict[str, float] = {}
    for day in days:
        for activity in day.activities:
            category = activity.category_label
            costs[category] = costs.get(category, 0.0) + activity.cost_value

    overall = sum(costs.values())
    return [
        CategoryCost(
            category=category,
            cost=cost,
            percentage=(cost / overall) * 100 if overall > 0 else 0.0,
        )
        for category, cost in costs.items()
    ]


def is_over_budget(day: ItineraryDay, daily_budget: float) -> bool:
    return day_cost(day) > daily_budget


def budget_status(budget: Optional[float], spent: float, warning_ratio: float = 0.8) -> BudgetStatus:
    """
    Classify spending against a budget.

    'over' when spent >= budget, 'warning' when spent >= warning_ratio * budget,
    'good' otherwise. An unset or zero budget is always 'good' with a 0 percentage.
    Remaining may be negative.
    """
    budget = float(budget or 0)
    remaining = budget - spent

    if budget <= 0:
        return BudgetStatus(status="good", budget=budget, spent=spent, remaining=remaining, percentage=0.0)

    percentage = (spent / budget) * 100
    if spent >= budget:
        status = "over"
    elif spent >= budget * warning_ratio:
        status = "warning"
    else:
        status = "good"
    return BudgetStatus(status=status, budget=budget, spent=spent, remaining=remaining, percentage=percentage)


def budget_alerts(
    days: Sequence[ItineraryDay],
    budget: Optional[float],
    config: Optional[BudgetSettings] = None,
) -> List[BudgetAlert]:
    config = config or BudgetSettings()
    budget = float(budget or 0)
    if budget <= 0:
        return []

    alerts: List[BudgetAlert] = []
    remaining = budget - total_cost(days)

    if remaining < 0:
        alerts.append(BudgetAlert(
            type="error",
            message=f"You're {format_currency(abs(remaining), config.currency)} over budget!",
        ))
    elif remaining < budget * config.low_remaining_ratio:
        alerts.append(BudgetAlert(
            type="warning",
            message=f"Only {format_currency(remaining, config.currency)} remaining in your budget",
        ))

    threshold = budget * config.expensive_activity_ratio
    for day in days:
        for activity in day.activities:
            if activity.cost_value > threshold:
                share = (activity.cost_value / budget) * 100
                alerts.append(BudgetAlert(
                    type="info",
                    message=(
                        f"{activity.name} costs {format_currency(activity.cost_value, config.currency)} "
                        f"({share:.1f}% of budget)"
                    ),
                ))

    return alerts


def summarize_itinerary(days: Sequence[ItineraryDay]) -> ItinerarySummary:
    return ItinerarySummary(
        total_cost=total_cost(days),
        activity_count=activity_count(days),
        category_breakdown=category_breakdown(days),
    )


def summarize_budget(
    days: Sequence[ItineraryDay],
    budget: Optional[float],
    config: Optional[BudgetSettings] = None,
) -> BudgetSummary:
    config = config or BudgetSettings()
    spent = total_cost(days)
    return BudgetSummary(
        total_cost=spent,
        activity_count=activity_count(days),
        status=budget_status(budget, spent, warning_ratio=config.warning_ratio),
        daily=daily_costs(days),
        categories=category_costs(days),
        category_counts=category_breakdown(days),
        alerts=budget_alerts(days, budget, config),
    )
