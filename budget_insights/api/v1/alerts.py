"""Smart alert endpoints - generate, list, dismiss"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from budget_insights.api.dependencies import get_alert_service, get_request_id
from budget_insights.api.v1.schemas import (
    AlertBatchResponse,
    AlertListResponse,
    AlertSchema,
    DismissResponse,
    UserRequest,
)
from budget_insights.domain.exceptions import AlertNotFoundError, StoreUnavailableError
from budget_insights.services.alerts import AlertService

router = APIRouter()


@router.get("/alerts", response_model=AlertListResponse)
def list_alerts(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    service: AlertService = Depends(get_alert_service),
):
    """Active (non-dismissed) alerts, newest first, with a severity summary"""
    try:
        alerts, summary = service.list_active(user_id)
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}")
        raise HTTPException(status_code=503, detail="Record store unavailable")

    return AlertListResponse(
        alerts=[AlertSchema.model_validate(a) for a in alerts],
        summary=summary,
    )


@router.post("/alerts/generate", response_model=AlertBatchResponse)
async def generate_alerts(
    request_body: UserRequest,
    request: Request,
    service: AlertService = Depends(get_alert_service),
):
    """
    Generate a new batch of alerts for the current month.

    Flow:
    1. Load budget, categories and both spend sources (each may degrade)
    2. Build category views and the month-end projection
    3. Ask the completion model for alerts, falling back to rules on any failure
    4. Persist at most 5 alerts and return them with the prediction
    """
    request_id = get_request_id(request)

    try:
        batch = await service.generate(request_body.user_id, request_id=request_id)
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Record store unavailable")

    return AlertBatchResponse(
        alerts=[AlertSchema.model_validate(a) for a in batch.alerts],
        source=batch.source,
        summary=batch.summary,
        prediction=batch.prediction,
        stats=batch.stats,
    )


@router.post("/alerts/{alert_id}/dismiss", response_model=DismissResponse)
def dismiss_alert(
    alert_id: str,
    request_body: UserRequest,
    service: AlertService = Depends(get_alert_service),
):
    """Soft-delete a single alert"""
    try:
        service.dismiss(request_body.user_id, alert_id)
    except AlertNotFoundError:
        raise HTTPException(status_code=404, detail="Alert not found")
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}")
        raise HTTPException(status_code=503, detail="Record store unavailable")

    return DismissResponse(dismissed=1, message="Alert dismissed")


@router.post("/alerts/dismiss-all", response_model=DismissResponse)
def dismiss_all_alerts(
    request_body: UserRequest,
    service: AlertService = Depends(get_alert_service),
):
    """Soft-delete every active alert of the user"""
    try:
        count = service.dismiss_all(request_body.user_id)
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}")
        raise HTTPException(status_code=503, detail="Record store unavailable")

    return DismissResponse(dismissed=count, message="All alerts dismissed")
