"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRequest(BaseModel):
    """Request body identifying the user an action applies to"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class MissionRequest(UserRequest):
    """Request body for POST /v1/gamification/missions"""

    mission_type: Optional[str] = Field(None, description="reduce_food | reduce_transport | reduce_entertainment")


class AlertSchema(BaseModel):
    """Single smart alert"""

    model_config = ConfigDict(from_attributes=True)

    alert_id: Optional[str] = None
    alert_type: str
    title: str
    message: str
    severity: Literal["info", "warning", "critical"]
    category_name: Optional[str] = None
    amount_involved: Optional[float] = None
    recommended_action: str
    low_confidence: bool = False
    dismissed: bool = False
    generated_at: Optional[datetime] = None


class AlertSummary(BaseModel):
    critical_count: int
    warning_count: int
    info_count: int
    total_alerts: int


class AlertListResponse(BaseModel):
    """Response for GET /v1/alerts"""

    alerts: List[AlertSchema]
    summary: AlertSummary


class PredictionSchema(BaseModel):
    end_of_month_balance: float
    risk_level: Literal["low", "medium", "high"]
    days_until_danger: Optional[int] = None
    safety_margin: float


class AlertStats(BaseModel):
    total_budget: float
    total_spent: float
    percentage_used: float
    previous_month_spent: float
    trend_message: Optional[str] = None


class AlertBatchResponse(BaseModel):
    """Response for POST /v1/alerts/generate"""

    alerts: List[AlertSchema]
    source: Literal["model", "fallback"]
    summary: AlertSummary
    prediction: PredictionSchema
    stats: AlertStats


class DismissResponse(BaseModel):
    dismissed: int
    message: str


class CategoryViewSchema(BaseModel):
    """Spend vs allocation for one category"""

    model_config = ConfigDict(from_attributes=True)

    category_id: str
    name: str
    budget_allocated: float
    amount_spent: float
    percentage_used: float
    is_over_budget: bool
    days_left: int
    projected_overspend: float


class ProjectionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    daily_spend_rate: float
    projected_month_end_balance: float
    budget_remaining: float
    days_until_danger: Optional[int] = None
    risk_level: Literal["low", "medium", "high"]


class ThermometerSchema(BaseModel):
    percentage: float
    budget_total: float
    budget_used: float
    budget_remaining: float
    status: Literal["good", "warning", "danger"]


class BudgetOverviewResponse(BaseModel):
    """Response for GET /v1/budget/overview"""

    user_id: str
    total_budget: float
    total_spent: float
    percentage_used: float
    projection: ProjectionSchema
    categories: List[CategoryViewSchema]
    thermometer: ThermometerSchema
    unavailable_sources: List[str] = []


class StreakSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_streak: int
    best_streak: int
    last_no_spend_date: Optional[date] = None
    streak_broken_count: int
    total_no_spend_days: int
    last_check_in_date: Optional[date] = None


class MissionSchema(BaseModel):
    """Weekly mission with its frozen baseline and live progress"""

    mission_id: Optional[str] = None
    mission_type: str
    category_name: str
    week_start: date
    week_end: date
    status: str
    target_percentage: int
    baseline_amount: float
    baseline_source: Literal["last_week", "monthly_average", "default_min"]
    target_amount: float
    current_week_amount: float


class MonthPredictionSchema(BaseModel):
    predicted_run_out_day: Optional[int] = None
    current_spend_rate: float
    projected_month_end: float
    days_remaining: int
    budget_remaining: float
    is_on_track: bool


class GamificationResponse(BaseModel):
    """Response for GET /v1/gamification"""

    user_id: str
    streak: Optional[StreakSchema] = None
    mission: Optional[MissionSchema] = None
    prediction: MonthPredictionSchema
    thermometer: ThermometerSchema
