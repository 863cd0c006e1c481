"""Domain models - pure Python dataclasses representing budget entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Literal, Optional

from budget_insights.utils.money import round2

SpendSource = Literal["manual", "bank"]
CategoryType = Literal["fixed", "percentage"]
RiskLevel = Literal["low", "medium", "high"]
Severity = Literal["info", "warning", "critical"]
BaselineSource = Literal["last_week", "monthly_average", "default_min"]
AlertType = Literal[
    "presupuesto_excedido",  # category over budget
    "prevision_deficit",  # projected shortfall
    "patron_detectado",  # spending pattern
    "colchon_peligro",  # safety cushion in danger
    "oportunidad_ahorro",  # savings opportunity
]

ALERT_TYPES = (
    "presupuesto_excedido",
    "prevision_deficit",
    "patron_detectado",
    "colchon_peligro",
    "oportunidad_ahorro",
)
SEVERITY_RANK = {"critical": 0, "warning": 1, "info": 2}


@dataclass
class SpendRecord:
    """Single expense from either manual entry or bank import, amount always >= 0"""

    record_id: str
    occurred_on: date
    amount: float
    category_id: Optional[str]
    source: SpendSource


@dataclass
class AggregatedSpend:
    """Union of both spend sources for one window"""

    records: List[SpendRecord] = field(default_factory=list)
    failed_sources: List[str] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(r.amount for r in self.records)


@dataclass
class CategoryDefinition:
    """Budget category: fixed amount or share of the monthly budget"""

    category_id: str
    name: str
    type: CategoryType
    fixed_amount: Optional[float] = None
    percentage: Optional[float] = None


@dataclass
class CategoryBudgetView:
    """Spend vs allocation for one category in the current month"""

    category_id: str
    name: str
    budget_allocated: float
    amount_spent: float
    percentage_used: float
    is_over_budget: bool
    days_left: int
    projected_overspend: float


@dataclass
class ProjectionResult:
    """Month-end run-rate projection"""

    daily_spend_rate: float
    projected_month_end_balance: float
    budget_remaining: float
    days_until_danger: Optional[int]
    risk_level: RiskLevel


@dataclass
class MonthPrediction:
    """When the budget runs out at the current pace"""

    predicted_run_out_day: Optional[int]
    current_spend_rate: float
    projected_month_end: float
    days_remaining: int
    budget_remaining: float
    is_on_track: bool


@dataclass
class BudgetThermometer:
    """Used budget vs the share of the month already elapsed"""

    percentage: float
    budget_total: float
    budget_used: float
    budget_remaining: float
    status: Literal["good", "warning", "danger"]


@dataclass
class SpendTrend:
    """Current month spend compared to the whole previous month"""

    previous_month_spent: float
    change_percent: float
    message: str


@dataclass
class FinancialSummary:
    """Figures fed to both the model prompt and the fallback rules"""

    total_budget: float
    total_spent: float
    budget_remaining: float
    percentage_used: float
    daily_spend_rate: float
    days_in_month: int
    days_elapsed: int
    days_remaining: int
    projected_month_end: float
    trend: Optional[SpendTrend] = None


@dataclass
class StreakState:
    """Consecutive no-spend day tracker, one per user"""

    current_streak: int = 0
    best_streak: int = 0
    last_no_spend_date: Optional[date] = None
    streak_broken_count: int = 0
    total_no_spend_days: int = 0
    last_check_in_date: Optional[date] = None


@dataclass
class MissionBaseline:
    """Historical spend a weekly mission is measured against"""

    category_name: str
    baseline_amount: float
    baseline_source: BaselineSource


@dataclass
class WeeklyMission:
    """Weekly spend-reduction challenge for a single category"""

    mission_type: str
    category_name: str
    week_start: date
    week_end: date
    baseline: MissionBaseline
    target_percentage: int = 10
    status: Literal["active", "completed", "failed"] = "active"
    current_week_amount: float = 0.0
    mission_id: Optional[str] = None

    @property
    def target_amount(self) -> float:
        return round2(self.baseline.baseline_amount * (100 - self.target_percentage) / 100)


@dataclass
class Alert:
    """Human-readable financial alert, produced by the model or the fallback rules"""

    alert_type: AlertType
    title: str
    message: str
    severity: Severity
    recommended_action: str
    category_name: Optional[str] = None
    amount_involved: Optional[float] = None
    low_confidence: bool = False
    dismissed: bool = False
    generated_at: Optional[datetime] = None
    alert_id: Optional[str] = None
