"""Gamification endpoints - streak check-in, weekly missions, overview"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from budget_insights.api.dependencies import get_gamification_service, get_mission_service, get_streak_tracker
from budget_insights.api.v1.schemas import GamificationResponse, MissionRequest, MissionSchema, StreakSchema, UserRequest
from budget_insights.domain.exceptions import StoreUnavailableError, ValidationFailure
from budget_insights.domain.models import WeeklyMission
from budget_insights.services.gamification import GamificationService, MissionService, StreakTracker
from budget_insights.utils.money import round2

router = APIRouter()


def _mission_schema(mission: Optional[WeeklyMission]) -> Optional[MissionSchema]:
    if mission is None:
        return None
    return MissionSchema(
        mission_id=mission.mission_id,
        mission_type=mission.mission_type,
        category_name=mission.category_name,
        week_start=mission.week_start,
        week_end=mission.week_end,
        status=mission.status,
        target_percentage=mission.target_percentage,
        baseline_amount=mission.baseline.baseline_amount,
        baseline_source=mission.baseline.baseline_source,
        target_amount=mission.target_amount,
        current_week_amount=round2(mission.current_week_amount),
    )


@router.get("/gamification", response_model=GamificationResponse)
def get_gamification(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    service: GamificationService = Depends(get_gamification_service),
):
    """Streak, active mission with live progress, month prediction and thermometer"""
    try:
        data = service.overview(user_id)
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}")
        raise HTTPException(status_code=503, detail="Record store unavailable")

    streak = data["streak"]
    return GamificationResponse(
        user_id=user_id,
        streak=StreakSchema(**asdict(streak)) if streak else None,
        mission=_mission_schema(data["mission"]),
        prediction=data["prediction"],
        thermometer=data["thermometer"],
    )


@router.post("/gamification/streak/check-in", response_model=StreakSchema)
def check_in_streak(
    request_body: UserRequest,
    tracker: StreakTracker = Depends(get_streak_tracker),
):
    """Daily no-spend check-in"""
    try:
        state = tracker.check_in(request_body.user_id)
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}")
        raise HTTPException(status_code=503, detail="Record store unavailable")

    return StreakSchema(**asdict(state))


@router.post("/gamification/missions", response_model=MissionSchema)
def create_mission(
    request_body: MissionRequest,
    service: MissionService = Depends(get_mission_service),
):
    """Start this week's mission with a frozen baseline"""
    try:
        mission = service.generate(request_body.user_id, request_body.mission_type)
    except ValidationFailure as e:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": ["body", e.field], "msg": e.message, "type": "value_error"}],
        )
    except StoreUnavailableError as e:
        logging.error(f"Store unavailable: {e}")
        raise HTTPException(status_code=503, detail="Record store unavailable")

    return _mission_schema(mission)
