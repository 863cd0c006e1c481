"""Projection engine - run-rate forecast of the month-end budget position"""

import math
from typing import Optional

from budget_insights.domain.models import (
    BudgetThermometer,
    MonthPrediction,
    ProjectionResult,
    RiskLevel,
    SpendTrend,
)
from budget_insights.utils.money import round1, round2, round_half_up

SAFETY_RATIO = 0.10


def daily_spend_rate(total_spent: float, days_elapsed: int) -> float:
    return total_spent / days_elapsed if days_elapsed > 0 else 0.0


def classify_risk(projected_month_end: float, total_budget: float) -> RiskLevel:
    """
    Risk bands on the projected month-end balance.

    Both comparisons are strict: a projection exactly equal to 10% of the
    budget is "low".
    """
    if projected_month_end < 0:
        return "high"
    elif projected_month_end < total_budget * SAFETY_RATIO:
        return "medium"
    return "low"


def days_until_danger(daily_rate: float, budget_remaining: float, safety_threshold: float) -> Optional[int]:
    """
    Whole days until remaining budget drops to the safety threshold.

    0 when already at or below the threshold, None when nothing has been
    spent yet (no rate to extrapolate).
    """
    if daily_rate > 0 and budget_remaining > safety_threshold:
        return math.floor((budget_remaining - safety_threshold) / daily_rate)
    elif budget_remaining <= safety_threshold:
        return 0
    return None


def project_month_end(
    total_budget: float,
    total_spent: float,
    days_elapsed: int,
    days_in_month: int,
) -> ProjectionResult:
    """
    Linear run-rate projection.

    Example (budget 2000, spent 1200, day 20 of 30):
        rate 60/day, month end 2000 - 60*30 = 200, remaining 800,
        threshold 200, danger in floor(600/60) = 10 days, risk "low"
    """
    rate = daily_spend_rate(total_spent, days_elapsed)
    projected = total_budget - rate * days_in_month
    remaining = total_budget - total_spent
    threshold = total_budget * SAFETY_RATIO

    return ProjectionResult(
        daily_spend_rate=rate,
        projected_month_end_balance=projected,
        budget_remaining=remaining,
        days_until_danger=days_until_danger(rate, remaining, threshold),
        risk_level=classify_risk(projected, total_budget),
    )


def predict_run_out(
    total_budget: float,
    total_spent: float,
    day_of_month: int,
    days_in_month: int,
) -> MonthPrediction:
    """Day of the month on which the budget is exhausted at the current pace"""
    rate = daily_spend_rate(total_spent, day_of_month)
    remaining = total_budget - total_spent
    days_remaining = days_in_month - day_of_month

    run_out_day: Optional[int] = None
    if rate > 0 and remaining > 0:
        candidate = day_of_month + math.floor(remaining / rate)
        if candidate <= days_in_month:
            run_out_day = candidate
    elif remaining <= 0:
        run_out_day = day_of_month

    projected = remaining - rate * days_remaining

    return MonthPrediction(
        predicted_run_out_day=run_out_day,
        current_spend_rate=round2(rate),
        projected_month_end=round2(projected),
        days_remaining=days_remaining,
        budget_remaining=round2(remaining),
        is_on_track=projected >= 0,
    )


def budget_thermometer(
    total_budget: float,
    total_spent: float,
    day_of_month: int,
    days_in_month: int,
) -> BudgetThermometer:
    """Compare budget consumption against the share of the month elapsed"""
    used = total_spent / total_budget * 100 if total_budget > 0 else 0.0
    expected = day_of_month / days_in_month * 100

    if used > expected + 15:
        status = "danger"
    elif used > expected + 5:
        status = "warning"
    else:
        status = "good"

    return BudgetThermometer(
        percentage=min(round1(used), 100.0),
        budget_total=total_budget,
        budget_used=round2(total_spent),
        budget_remaining=round2(total_budget - total_spent),
        status=status,
    )


def month_over_month_trend(total_spent: float, previous_month_spent: float) -> SpendTrend:
    """Percent change of this month's spend vs the full previous month"""
    if previous_month_spent <= 0:
        return SpendTrend(previous_month_spent=previous_month_spent, change_percent=0.0, message="No data for the previous month")

    change = (total_spent - previous_month_spent) / previous_month_spent * 100
    sign = "+" if change > 0 else ""
    return SpendTrend(
        previous_month_spent=previous_month_spent,
        change_percent=round1(change),
        message=f"Spend vs previous month (total): {sign}{int(round_half_up(change))}%",
    )
