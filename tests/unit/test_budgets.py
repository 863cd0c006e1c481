"""Unit tests for category budget analysis"""

from datetime import date
from budget_insights.domain.budgets import (
    active_categories,
    analyze_categories,
    percentage_used,
    resolve_allocation,
)
from budget_insights.domain.models import CategoryDefinition, SpendRecord


def _spend(amount, category_id, source="manual"):
    return SpendRecord(
        record_id=f"{category_id}-{amount}",
        occurred_on=date(2026, 10, 5),
        amount=amount,
        category_id=category_id,
        source=source,
    )


GROCERIES = CategoryDefinition("c1", "Groceries", "fixed", fixed_amount=300)
TRANSPORT = CategoryDefinition("c2", "Transport", "percentage", percentage=10)
LEISURE = CategoryDefinition("c3", "Leisure", "percentage", percentage=5)


def test_resolve_allocation_fixed_and_percentage():
    assert resolve_allocation(GROCERIES, total_budget=2000) == 300
    assert resolve_allocation(TRANSPORT, total_budget=2000) == 200


def test_percentage_used_rounds_half_up_to_one_decimal():
    """6.25% rounds to 6.3, as round(x * 1000) / 10"""
    assert percentage_used(1, 16) == 6.3
    assert percentage_used(1, 3) == 33.3
    assert percentage_used(2, 3) == 66.7
    assert percentage_used(50, 0) == 0


def test_analyze_categories_flags_over_budget():
    records = [_spend(200, "c1"), _spend(120, "c1", "bank"), _spend(50, "c2")]

    views = analyze_categories(records, [GROCERIES, TRANSPORT], total_budget=2000, days_elapsed=20, days_in_month=30)
    groceries, transport = views

    assert groceries.amount_spent == 320
    assert groceries.is_over_budget is True
    assert groceries.percentage_used == 106.7
    assert groceries.days_left == 10
    # 320 / 20 * 30 - 300
    assert groceries.projected_overspend == 180

    assert transport.is_over_budget is False
    assert transport.percentage_used == 25
    assert transport.projected_overspend == 0


def test_spend_equal_to_allocation_is_not_over_budget():
    views = analyze_categories([_spend(300, "c1")], [GROCERIES], 2000, 15, 30)

    assert views[0].is_over_budget is False
    assert views[0].percentage_used == 100


def test_zero_spend_categories_are_included():
    views = analyze_categories([_spend(10, "c1")], [GROCERIES, TRANSPORT, LEISURE], 2000, 10, 30)

    assert [v.name for v in views] == ["Groceries", "Transport", "Leisure"]
    assert [v.name for v in active_categories(views)] == ["Groceries"]


def test_unknown_category_spend_is_ignored():
    """Records pointing at deleted categories do not break the analysis"""
    records = [_spend(90, "deleted"), _spend(10, None)]

    views = analyze_categories(records, [GROCERIES], 2000, 10, 30)

    assert views[0].amount_spent == 0


def test_zero_days_elapsed_has_no_projected_overspend():
    views = analyze_categories([_spend(500, "c1")], [GROCERIES], 2000, 0, 30)

    assert views[0].projected_overspend == 0
    assert views[0].is_over_budget is True
