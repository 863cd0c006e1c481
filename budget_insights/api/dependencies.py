"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Callable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from budget_insights.infrastructure.clients.completion import CompletionClient
from budget_insights.infrastructure.database.repositories import RecordStore
from budget_insights.infrastructure.database.session import get_db
from budget_insights.services.alerts import AlertService, AlertSynthesizer
from budget_insights.services.budget import BudgetService
from budget_insights.services.gamification import GamificationService, MissionService, StreakTracker


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock() -> Callable[[], date]:
    """Source of "today" for month and week boundaries"""
    return date.today


def get_completion_client() -> CompletionClient:
    """Provide generative completion client instance"""
    return CompletionClient()


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_budget_service(
    store: RecordStore = Depends(get_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> BudgetService:
    return BudgetService(store, clock=clock)


def get_alert_service(
    store: RecordStore = Depends(get_store),
    budget: BudgetService = Depends(get_budget_service),
    completion: CompletionClient = Depends(get_completion_client),
) -> AlertService:
    return AlertService(store, AlertSynthesizer(completion), budget)


def get_gamification_service(
    store: RecordStore = Depends(get_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> GamificationService:
    return GamificationService(store, clock=clock)


def get_streak_tracker(
    store: RecordStore = Depends(get_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> StreakTracker:
    return StreakTracker(store, clock=clock)


def get_mission_service(
    store: RecordStore = Depends(get_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> MissionService:
    return MissionService(store, clock=clock)
