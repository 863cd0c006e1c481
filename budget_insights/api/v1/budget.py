"""GET /v1/budget/overview - month projection and category breakdown"""

import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Query

from budget_insights.api.dependencies import get_budget_service
from budget_insights.api.v1.schemas import BudgetOverviewResponse, CategoryViewSchema, ProjectionSchema
from budget_insights.domain.exceptions import StoreUnavailableError
from budget_insights.domain.projection import budget_thermometer
from budget_insights.services.budget import BudgetService

router = APIRouter()


@router.get("/budget/overview", response_model=BudgetOverviewResponse)
def get_budget_overview(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    service: BudgetService = Depends(get_budget_service),
):
    """
    Current month at a glance.

    Returns:
        Run-rate projection, one view per category and the budget thermometer.
        Sources that could not be read are listed in `unavailable_sources`.
    """
    try:
        snapshot = service.snapshot(user_id, include_previous_month=False)
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}")
        raise HTTPException(status_code=503, detail="Record store unavailable")

    summary = snapshot.summary
    thermometer = budget_thermometer(summary.total_budget, snapshot.spend.total, summary.days_elapsed, summary.days_in_month)

    return BudgetOverviewResponse(
        user_id=user_id,
        total_budget=summary.total_budget,
        total_spent=summary.total_spent,
        percentage_used=summary.percentage_used,
        projection=ProjectionSchema.model_validate(snapshot.projection),
        categories=[CategoryViewSchema.model_validate(v) for v in snapshot.views],
        thermometer=asdict(thermometer),
        unavailable_sources=snapshot.failed_sources,
    )
