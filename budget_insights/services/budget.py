"""Current-month budget snapshot: spend, category views, projection"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from budget_insights.config import settings
from budget_insights.domain.budgets import analyze_categories, percentage_used
from budget_insights.domain.models import (
    AggregatedSpend,
    CategoryBudgetView,
    CategoryDefinition,
    FinancialSummary,
    ProjectionResult,
)
from budget_insights.domain.projection import month_over_month_trend, project_month_end
from budget_insights.infrastructure.database.repositories import RecordStore
from budget_insights.services.aggregation import TransactionAggregator
from budget_insights.services.reads import ReadTracker
from budget_insights.utils.date_utils import days_in_month, month_bounds, previous_month_bounds
from budget_insights.utils.money import round2


@dataclass
class MonthSnapshot:
    """Everything derived for one user and month, recomputed per request"""

    today: date
    total_budget: float
    categories: List[CategoryDefinition]
    spend: AggregatedSpend
    views: List[CategoryBudgetView]
    projection: ProjectionResult
    summary: FinancialSummary
    failed_sources: List[str] = field(default_factory=list)


def _to_category(row: dict) -> CategoryDefinition:
    return CategoryDefinition(
        category_id=str(row["id"]),
        name=row["name"],
        type="fixed" if row.get("type") == "fixed" else "percentage",
        fixed_amount=row.get("fixed_amount"),
        percentage=row.get("percentage"),
    )


class BudgetService:
    """Loads the month's budget inputs from the store and runs the analyzers"""

    def __init__(
        self,
        store: RecordStore,
        aggregator: Optional[TransactionAggregator] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.store = store
        self.aggregator = aggregator or TransactionAggregator(store)
        self.clock = clock

    def load_total_budget(self, user_id: str, day: date, tracker: ReadTracker) -> float:
        """Budget for the month of `day`, or the configured default when none is set"""
        rows = tracker.read(
            "budget",
            lambda: self.store.query(
                "monthly_budget",
                {"user_id": user_id, "year": day.year, "month": day.month},
                limit=1,
            ),
            [],
        )
        if rows and rows[0].get("total_budget"):
            return float(rows[0]["total_budget"])
        return settings.default_total_budget

    def load_categories(self, user_id: str, tracker: ReadTracker) -> List[CategoryDefinition]:
        rows = tracker.read(
            "categories",
            lambda: self.store.query("category", {"user_id": user_id, "is_active": True}, sort=[("name", "asc")]),
            [],
        )
        return [_to_category(row) for row in rows]

    def find_category(self, user_id: str, name: str, tracker: ReadTracker) -> Optional[CategoryDefinition]:
        rows = tracker.read(
            "categories",
            lambda: self.store.query("category", {"user_id": user_id, "name": name}, limit=1),
            [],
        )
        return _to_category(rows[0]) if rows else None

    def snapshot(self, user_id: str, include_previous_month: bool = True) -> MonthSnapshot:
        """
        Build the month snapshot.

        Each read degrades on its own; StoreUnavailableError is raised only
        when all of them failed.
        """
        today = self.clock()
        tracker = ReadTracker(user_id)
        month_start, _ = month_bounds(today)
        month_days = days_in_month(today)
        days_elapsed = today.day

        total_budget = self.load_total_budget(user_id, today, tracker)
        categories = self.load_categories(user_id, tracker)
        spend = self.aggregator.fetch(user_id, month_start, today, tracker=tracker)

        trend = None
        if include_previous_month:
            prev_start, prev_end = previous_month_bounds(today)
            previous_spent = self.aggregator.total(user_id, prev_start, prev_end, tracker=tracker)
            trend = month_over_month_trend(spend.total, previous_spent)

        tracker.raise_if_store_down()

        total_spent = spend.total
        views = analyze_categories(spend.records, categories, total_budget, days_elapsed, month_days)
        projection = project_month_end(total_budget, total_spent, days_elapsed, month_days)

        summary = FinancialSummary(
            total_budget=total_budget,
            total_spent=round2(total_spent),
            budget_remaining=round2(projection.budget_remaining),
            percentage_used=percentage_used(total_spent, total_budget),
            daily_spend_rate=round2(projection.daily_spend_rate),
            days_in_month=month_days,
            days_elapsed=days_elapsed,
            days_remaining=month_days - days_elapsed,
            projected_month_end=round2(projection.projected_month_end_balance),
            trend=trend,
        )

        return MonthSnapshot(
            today=today,
            total_budget=total_budget,
            categories=categories,
            spend=spend,
            views=views,
            projection=projection,
            summary=summary,
            failed_sources=tracker.failed_sources,
        )
