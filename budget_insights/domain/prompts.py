"""Prompt text for the alert-writing model"""

from typing import Iterable

from budget_insights.domain.models import ALERT_TYPES, CategoryBudgetView, FinancialSummary
from budget_insights.utils.money import format_currency

ALERTS_SYSTEM_PROMPT = (
    "You are an expert financial advisor who writes smart alerts from budget data. "
    "You always answer with valid JSON."
)


def _category_line(cat: CategoryBudgetView) -> str:
    line = (
        f"- {cat.name} (id {cat.category_id}): {format_currency(cat.amount_spent)} of "
        f"{format_currency(cat.budget_allocated)} ({cat.percentage_used}%)"
    )
    if cat.is_over_budget:
        line += " OVER BUDGET"
    if cat.projected_overspend > 0:
        line += f" - projected overspend: {format_currency(cat.projected_overspend)}"
    return line


def build_alerts_prompt(summary: FinancialSummary, categories: Iterable[CategoryBudgetView], max_alerts: int = 5) -> str:
    """User prompt embedding the month's figures and the active categories"""
    breakdown = "\n".join(_category_line(c) for c in categories) or "- No categorized spending yet"
    trend = summary.trend
    previous = format_currency(trend.previous_month_spent) if trend else format_currency(0)
    trend_message = trend.message if trend else "No data for the previous month"
    alert_types = " | ".join(f'"{t}"' for t in ALERT_TYPES)

    return f"""Analyse this month's financial data and write personalised smart alerts.

FINANCIAL DATA:
- Total monthly budget: {format_currency(summary.total_budget)}
- Spent so far: {format_currency(summary.total_spent)} ({summary.percentage_used}%)
- Remaining: {format_currency(summary.budget_remaining)}
- Day of month: {summary.days_elapsed} of {summary.days_in_month}
- Days remaining: {summary.days_remaining}
- Daily spending pace: {format_currency(summary.daily_spend_rate)}/day
- Month-end projection: {format_currency(summary.projected_month_end)}

HISTORY:
- Previous month total spend: {previous}
- Current trend: {trend_message}

CATEGORY BREAKDOWN:
{breakdown}

INSTRUCTIONS:
Return a JSON array of alerts. Each alert has:
- alert_type: {alert_types}
- title: short, clear title (max 50 characters)
- message: 2-3 sentences explaining the issue; compare with the previous month when relevant
- severity: "info" | "warning" | "critical"
- category_name: exact category name from the breakdown, or null for a general alert
- amount_involved: relevant amount or null
- recommended_action: specific, actionable advice

RULES:
1. At most {max_alerts} alerts, most important first
2. A category above 80% is "warning", above 100% is "critical"
3. If the month-end projection is negative, include a "colchon_peligro" alert
4. Mention it if the user is spending faster than last month and it is worrying
5. If everything is fine, write 1 "oportunidad_ahorro" alert with improvement tips
6. Be natural and avoid unnecessary alarm

Answer ONLY with the JSON array, no extra explanation."""
