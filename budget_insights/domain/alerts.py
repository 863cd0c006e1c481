"""Deterministic alert rules - used whenever the model output is unavailable"""

from typing import Dict, Iterable, List

from budget_insights.domain.models import SEVERITY_RANK, Alert, CategoryBudgetView, FinancialSummary
from budget_insights.utils.money import format_currency, round2

MAX_ALERTS = 5
CATEGORY_WARNING_PERCENT = 80
CATEGORY_WARNING_MIN_DAYS = 5
HEALTHY_USAGE_PERCENT = 70
CUSHION_RATIO = 0.1


def prioritize(alerts: Iterable[Alert], limit: int = MAX_ALERTS) -> List[Alert]:
    """Stable sort critical > warning > info, then keep the first `limit`"""
    ordered = sorted(alerts, key=lambda a: SEVERITY_RANK.get(a.severity, len(SEVERITY_RANK)))
    return ordered[:limit]


def summarize_severities(alerts: Iterable[Alert]) -> Dict[str, int]:
    alerts = list(alerts)
    return {
        "critical_count": sum(1 for a in alerts if a.severity == "critical"),
        "warning_count": sum(1 for a in alerts if a.severity == "warning"),
        "info_count": sum(1 for a in alerts if a.severity == "info"),
        "total_alerts": len(alerts),
    }


def _category_alerts(categories: Iterable[CategoryBudgetView]) -> List[Alert]:
    alerts = []
    for cat in categories:
        if cat.is_over_budget:
            excess = round2(cat.amount_spent - cat.budget_allocated)
            alerts.append(
                Alert(
                    alert_type="presupuesto_excedido",
                    title=f"{cat.name}: budget exceeded",
                    message=(
                        f"You have spent {format_currency(cat.amount_spent)} of the "
                        f"{format_currency(cat.budget_allocated)} allocated. You are "
                        f"{format_currency(excess)} over the limit."
                    ),
                    severity="critical",
                    category_name=cat.name,
                    amount_involved=excess,
                    recommended_action=f"Cut back on {cat.name} for the rest of the month to make up for the excess.",
                )
            )
        elif cat.percentage_used > CATEGORY_WARNING_PERCENT and cat.days_left > CATEGORY_WARNING_MIN_DAYS:
            daily_cap = (cat.budget_allocated - cat.amount_spent) / cat.days_left
            alerts.append(
                Alert(
                    alert_type="prevision_deficit",
                    title=f"{cat.name}: high spending pace",
                    message=(
                        f"You have already used {cat.percentage_used}% of the {cat.name} budget "
                        f"with {cat.days_left} days to go. At this pace you will go over the limit."
                    ),
                    severity="warning",
                    category_name=cat.name,
                    amount_involved=cat.projected_overspend,
                    recommended_action=(
                        f"Try to keep {cat.name} spending under {format_currency(daily_cap)} per day."
                    ),
                )
            )
    return alerts


def _cushion_alert(summary: FinancialSummary) -> List[Alert]:
    projected = summary.projected_month_end

    if projected < 0:
        deficit = round2(abs(projected))
        days = summary.days_remaining if summary.days_remaining > 0 else 1
        reduced_daily = summary.budget_remaining / days
        return [
            Alert(
                alert_type="colchon_peligro",
                title="Negative month-end projection",
                message=(
                    f"At your current pace ({format_currency(summary.daily_spend_rate)}/day) "
                    f"you will finish the month with a deficit of {format_currency(deficit)}."
                ),
                severity="critical",
                amount_involved=deficit,
                recommended_action=(
                    f"Reduce your daily spending to {format_currency(reduced_daily)} "
                    f"to reach the end of the month without a deficit."
                ),
            )
        ]

    if projected < summary.total_budget * CUSHION_RATIO:
        return [
            Alert(
                alert_type="prevision_deficit",
                title="Safety cushion at risk",
                message=(
                    f"Your month-end projection is only {format_currency(projected)}, "
                    f"less than 10% of your budget."
                ),
                severity="warning",
                amount_involved=round2(projected),
                recommended_action="Consider trimming non-essential spending to widen your safety margin.",
            )
        ]

    return []


def generate_fallback_alerts(
    summary: FinancialSummary,
    categories: Iterable[CategoryBudgetView],
    limit: int = MAX_ALERTS,
) -> List[Alert]:
    """
    Rule-based alerts with the same shape as the model's.

    Rules, in generation order:
    - critical presupuesto_excedido per over-budget category
    - otherwise warning prevision_deficit per category above 80% with more
      than 5 days left, suggesting a daily cap
    - critical colchon_peligro when the month-end projection is negative,
      else warning prevision_deficit when it is under 10% of the budget
    - if nothing fired and under 70% of the budget is used, one info
      oportunidad_ahorro
    """
    alerts = _category_alerts(categories)
    alerts.extend(_cushion_alert(summary))

    if not alerts and summary.percentage_used < HEALTHY_USAGE_PERCENT:
        alerts.append(
            Alert(
                alert_type="oportunidad_ahorro",
                title="Great spending control",
                message=(
                    f"You have only used {summary.percentage_used}% of your budget. You are on track "
                    f"to finish the month with a surplus of {format_currency(summary.projected_month_end)}."
                ),
                severity="info",
                amount_involved=round2(summary.projected_month_end),
                recommended_action="Consider moving the projected surplus into your emergency fund or investments.",
            )
        )

    return prioritize(alerts, limit)
