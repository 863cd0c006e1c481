"""Unit tests for the rule-based alert generator"""

from budget_insights.domain.alerts import generate_fallback_alerts, prioritize, summarize_severities
from budget_insights.domain.models import Alert, CategoryBudgetView, FinancialSummary


def _summary(percentage_used=40.0, projected_month_end=800.0, budget_remaining=1200.0, days_remaining=10, total_budget=2000.0):
    return FinancialSummary(
        total_budget=total_budget,
        total_spent=total_budget - budget_remaining,
        budget_remaining=budget_remaining,
        percentage_used=percentage_used,
        daily_spend_rate=40.0,
        days_in_month=30,
        days_elapsed=30 - days_remaining,
        days_remaining=days_remaining,
        projected_month_end=projected_month_end,
    )


def _view(name, allocated, spent, percentage, days_left=10, over=False, overspend=0.0):
    return CategoryBudgetView(
        category_id=name.lower(),
        name=name,
        budget_allocated=allocated,
        amount_spent=spent,
        percentage_used=percentage,
        is_over_budget=over,
        days_left=days_left,
        projected_overspend=overspend,
    )


def test_over_budget_category_is_critical():
    """Allocated 300, spent 320"""
    groceries = _view("Groceries", 300, 320, 106.7, over=True, overspend=180)

    alerts = generate_fallback_alerts(_summary(), [groceries])

    assert len(alerts) == 1
    assert alerts[0].alert_type == "presupuesto_excedido"
    assert alerts[0].severity == "critical"
    assert alerts[0].amount_involved == 20
    assert alerts[0].category_name == "Groceries"


def test_healthy_month_gets_one_savings_alert():
    transport = _view("Transport", 200, 60, 30.0)

    alerts = generate_fallback_alerts(_summary(percentage_used=65, projected_month_end=700), [transport])

    assert len(alerts) == 1
    assert alerts[0].alert_type == "oportunidad_ahorro"
    assert alerts[0].severity == "info"
    assert alerts[0].amount_involved == 700


def test_no_savings_alert_above_seventy_percent():
    alerts = generate_fallback_alerts(_summary(percentage_used=75, projected_month_end=700), [])

    assert alerts == []


def test_fast_category_gets_daily_cap():
    groceries = _view("Groceries", 300, 250, 83.3, days_left=10, overspend=75)

    alerts = generate_fallback_alerts(_summary(), [groceries])

    assert alerts[0].alert_type == "prevision_deficit"
    assert alerts[0].severity == "warning"
    assert "€5.00 per day" in alerts[0].recommended_action


def test_fast_category_near_month_end_is_quiet():
    groceries = _view("Groceries", 300, 250, 83.3, days_left=5)

    alerts = generate_fallback_alerts(_summary(percentage_used=75), [groceries])

    assert alerts == []


def test_negative_projection_is_critical_cushion_alert():
    alerts = generate_fallback_alerts(_summary(projected_month_end=-30, budget_remaining=100, days_remaining=10), [])

    assert len(alerts) == 1
    assert alerts[0].alert_type == "colchon_peligro"
    assert alerts[0].severity == "critical"
    assert alerts[0].amount_involved == 30
    assert "€30.00" in alerts[0].message
    assert "€10.00" in alerts[0].recommended_action


def test_thin_projection_is_cushion_warning():
    alerts = generate_fallback_alerts(_summary(projected_month_end=150), [])

    assert len(alerts) == 1
    assert alerts[0].alert_type == "prevision_deficit"
    assert alerts[0].severity == "warning"
    assert alerts[0].category_name is None


def test_alerts_are_capped_at_five():
    views = [_view(f"Cat{i}", 100, 150, 150.0, over=True) for i in range(7)]

    alerts = generate_fallback_alerts(_summary(), views)

    assert len(alerts) == 5
    assert [a.category_name for a in alerts] == ["Cat0", "Cat1", "Cat2", "Cat3", "Cat4"]


def test_critical_sorts_before_earlier_warning():
    groceries = _view("Groceries", 300, 250, 83.3, days_left=10)

    alerts = generate_fallback_alerts(_summary(projected_month_end=-30), [groceries])

    assert [a.severity for a in alerts] == ["critical", "warning"]
    assert alerts[0].alert_type == "colchon_peligro"


def test_prioritize_is_stable_within_severity():
    alerts = [
        Alert("oportunidad_ahorro", "a", "", "info", ""),
        Alert("prevision_deficit", "b", "", "warning", ""),
        Alert("patron_detectado", "c", "", "info", ""),
        Alert("prevision_deficit", "d", "", "warning", ""),
    ]

    ordered = prioritize(alerts, limit=3)

    assert [a.title for a in ordered] == ["b", "d", "a"]
    assert summarize_severities(ordered) == {
        "critical_count": 0,
        "warning_count": 2,
        "info_count": 1,
        "total_alerts": 3,
    }
