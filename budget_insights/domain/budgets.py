"""Category budget analysis - spend vs allocation per category"""

from collections import defaultdict
from typing import Dict, Iterable, List

from budget_insights.domain.models import CategoryBudgetView, CategoryDefinition, SpendRecord
from budget_insights.utils.money import round1, round2


def resolve_allocation(category: CategoryDefinition, total_budget: float) -> float:
    """
    Budget allocated to a category for the month.

    - fixed: the category's fixed amount
    - percentage: share of the month's total budget
    """
    if category.type == "fixed":
        return float(category.fixed_amount or 0)
    return total_budget * float(category.percentage or 0) / 100


def spend_by_category(records: Iterable[SpendRecord]) -> Dict[str, float]:
    """Sum spend per category id; uncategorized records are skipped"""
    totals: Dict[str, float] = defaultdict(float)
    for record in records:
        if record.category_id:
            totals[record.category_id] += record.amount
    return dict(totals)


def percentage_used(amount_spent: float, budget_allocated: float) -> float:
    if budget_allocated <= 0:
        return 0.0
    return round1(amount_spent / budget_allocated * 100)


def analyze_categories(
    records: Iterable[SpendRecord],
    categories: List[CategoryDefinition],
    total_budget: float,
    days_elapsed: int,
    days_in_month: int,
) -> List[CategoryBudgetView]:
    """
    Build one CategoryBudgetView per category, including categories without spend.

    Spend assigned to category ids that are not in `categories` (deleted or
    unknown) is ignored here; it still counts towards the month total.

    Projected overspend extrapolates the category's run-rate to the full month:
        max(0, spent / days_elapsed * days_in_month - allocated)
    """
    spent_by_id = spend_by_category(records)
    days_left = max(days_in_month - days_elapsed, 0)

    views = []
    for category in categories:
        allocated = resolve_allocation(category, total_budget)
        spent = spent_by_id.get(category.category_id, 0.0)

        daily_rate = spent / days_elapsed if days_elapsed > 0 else 0.0
        projected_overspend = max(0.0, daily_rate * days_in_month - allocated)

        views.append(
            CategoryBudgetView(
                category_id=category.category_id,
                name=category.name,
                budget_allocated=allocated,
                amount_spent=spent,
                percentage_used=percentage_used(spent, allocated),
                is_over_budget=spent > allocated,
                days_left=days_left,
                projected_overspend=round2(projected_overspend),
            )
        )

    return views


def active_categories(views: Iterable[CategoryBudgetView]) -> List[CategoryBudgetView]:
    """Only categories with some spend this month"""
    return [v for v in views if v.amount_spent > 0]
