"""No-spend streaks, weekly missions and the gamification overview"""

import logging
import random
from dataclasses import asdict
from datetime import date, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from budget_insights.config import settings
from budget_insights.domain.missions import (
    NOISE_FLOOR,
    TARGET_REDUCTION_PERCENT,
    TRAILING_WINDOW_DAYS,
    choose_mission_type,
    resolve_baseline,
)
from budget_insights.domain.models import MissionBaseline, StreakState, WeeklyMission
from budget_insights.domain.projection import budget_thermometer, predict_run_out
from budget_insights.domain.streaks import already_checked_in, apply_check_in
from budget_insights.infrastructure.database.repositories import RecordStore, as_date
from budget_insights.infrastructure.observability.logging import log_streak_check_in
from budget_insights.infrastructure.observability.metrics import mission_baseline_counter, streak_check_in_counter
from budget_insights.services.aggregation import TransactionAggregator
from budget_insights.services.budget import BudgetService
from budget_insights.services.reads import ReadTracker
from budget_insights.utils.date_utils import previous_week_bounds, week_bounds

logger = logging.getLogger(__name__)

_STREAK_FIELDS = (
    "current_streak",
    "best_streak",
    "last_no_spend_date",
    "streak_broken_count",
    "total_no_spend_days",
    "last_check_in_date",
)


def _to_streak(row: Dict[str, Any]) -> StreakState:
    return StreakState(
        current_streak=row.get("current_streak") or 0,
        best_streak=row.get("best_streak") or 0,
        last_no_spend_date=as_date(row.get("last_no_spend_date")),
        streak_broken_count=row.get("streak_broken_count") or 0,
        total_no_spend_days=row.get("total_no_spend_days") or 0,
        last_check_in_date=as_date(row.get("last_check_in_date")),
    )


def _check_in_outcome(previous: Optional[StreakState], current: StreakState, had_spend: bool) -> str:
    if had_spend:
        return "broken" if previous is not None else "started_with_spend"
    if previous is None:
        return "started"
    return "continued" if current.current_streak > 1 else "restarted"


class StreakTracker:
    """Daily no-spend check-in against the user's single streak record"""

    def __init__(
        self,
        store: RecordStore,
        aggregator: Optional[TransactionAggregator] = None,
        clock: Callable[[], date] = date.today,
        same_day_guard: Optional[bool] = None,
    ):
        self.store = store
        self.aggregator = aggregator or TransactionAggregator(store)
        self.clock = clock
        self.same_day_guard = settings.streak_same_day_guard if same_day_guard is None else same_day_guard

    def load(self, user_id: str) -> Tuple[Optional[str], Optional[StreakState]]:
        rows = self.store.query("user_streak", {"user_id": user_id}, limit=1)
        if not rows:
            return None, None
        return str(rows[0]["id"]), _to_streak(rows[0])

    def check_in(self, user_id: str) -> StreakState:
        """
        Record today's outcome and return the new state.

        With the same-day guard on, a second check-in on the same date returns
        the stored state untouched instead of counting the day twice.
        """
        today = self.clock()
        record_id, state = self.load(user_id)

        if self.same_day_guard and already_checked_in(state, today):
            streak_check_in_counter.labels(outcome="duplicate").inc()
            log_streak_check_in(user_id, "duplicate", state.current_streak, state.best_streak)
            return state

        tracker = ReadTracker(user_id)
        had_spend = self.aggregator.has_spend_on(user_id, today, tracker=tracker)
        tracker.raise_if_store_down()

        new_state = apply_check_in(state, had_spend, today)
        fields = {name: getattr(new_state, name) for name in _STREAK_FIELDS}
        if record_id is None:
            self.store.create("user_streak", {"user_id": user_id, **fields})
        else:
            self.store.update_by_id("user_streak", record_id, fields)
        self.store.commit()

        outcome = _check_in_outcome(state, new_state, had_spend)
        streak_check_in_counter.labels(outcome=outcome).inc()
        log_streak_check_in(user_id, outcome, new_state.current_streak, new_state.best_streak)
        return new_state


class MissionBaselineResolver:
    """Weekly baseline for a category: last week, else 30-day average, else a default"""

    def __init__(
        self,
        budget: BudgetService,
        aggregator: Optional[TransactionAggregator] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.budget = budget
        self.aggregator = aggregator or budget.aggregator
        self.clock = clock

    def resolve(self, user_id: str, category_name: str, today: Optional[date] = None) -> MissionBaseline:
        today = today or self.clock()
        tracker = ReadTracker(user_id)

        category = self.budget.find_category(user_id, category_name, tracker)
        if category is None:
            logger.info(f"Category '{category_name}' not found, using default baseline", extra={"user_id": user_id})
            return resolve_baseline(category_name, None, None)

        last_start, last_end = previous_week_bounds(today)
        last_week = self.aggregator.total(user_id, last_start, last_end, category.category_id, tracker)

        trailing = None
        if last_week <= NOISE_FLOOR:
            trailing_start = today - timedelta(days=TRAILING_WINDOW_DAYS)
            trailing = self.aggregator.total(user_id, trailing_start, today, category.category_id, tracker)

        return resolve_baseline(category_name, last_week, trailing)


def _to_mission(row: Dict[str, Any]) -> WeeklyMission:
    return WeeklyMission(
        mission_id=str(row["id"]),
        mission_type=row["mission_type"],
        category_name=row["category_name"],
        week_start=as_date(row["week_start"]),
        week_end=as_date(row["week_end"]),
        baseline=MissionBaseline(row["category_name"], row["baseline_amount"], row["baseline_source"]),
        target_percentage=row.get("target_percentage") or TARGET_REDUCTION_PERCENT,
        status=row.get("status") or "active",
        current_week_amount=row.get("current_week_amount") or 0.0,
    )


class MissionService:
    """Creates weekly missions and reports live progress against the frozen baseline"""

    def __init__(
        self,
        store: RecordStore,
        budget: Optional[BudgetService] = None,
        clock: Callable[[], date] = date.today,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.budget = budget or BudgetService(store, clock=clock)
        self.resolver = MissionBaselineResolver(self.budget, clock=clock)
        self.clock = clock
        self.rng = rng

    def generate(self, user_id: str, mission_type: Optional[str] = None) -> WeeklyMission:
        """
        Start this week's mission; any still-active mission is marked failed.

        Raises:
            InvalidMissionTypeError: when `mission_type` is not in the catalogue
        """
        chosen = choose_mission_type(mission_type, self.rng)
        today = self.clock()
        week_start, week_end = week_bounds(today)
        baseline = self.resolver.resolve(user_id, chosen.category_name, today)
        mission_baseline_counter.labels(source=baseline.baseline_source).inc()

        tracker = ReadTracker(user_id)
        active = tracker.read(
            "missions",
            lambda: self.store.query("weekly_mission", {"user_id": user_id, "status": "active"}),
            [],
        )
        for row in active:
            self.store.update_by_id("weekly_mission", row["id"], {"status": "failed"})

        row = self.store.create(
            "weekly_mission",
            {
                "user_id": user_id,
                "mission_type": chosen.key,
                "category_name": chosen.category_name,
                "target_percentage": TARGET_REDUCTION_PERCENT,
                "week_start": week_start,
                "week_end": week_end,
                "status": "active",
                "baseline_amount": baseline.baseline_amount,
                "baseline_source": baseline.baseline_source,
                "current_week_amount": 0.0,
            },
        )
        self.store.commit()
        logger.info(
            f"Created mission {chosen.key}",
            extra={"user_id": user_id, "baseline": baseline.baseline_amount, "baseline_source": baseline.baseline_source},
        )
        return _to_mission(row)

    def active(self, user_id: str, tracker: Optional[ReadTracker] = None) -> Optional[WeeklyMission]:
        """Latest active mission with `current_week_amount` recomputed from both sources"""
        tracker = tracker or ReadTracker(user_id)
        rows = tracker.read(
            "missions",
            lambda: self.store.query(
                "weekly_mission",
                {"user_id": user_id, "status": "active"},
                sort=[("week_start", "desc")],
                limit=1,
            ),
            [],
        )
        if not rows:
            return None

        mission = _to_mission(rows[0])
        category = self.budget.find_category(user_id, mission.category_name, tracker)
        if category is not None:
            mission.current_week_amount = self.budget.aggregator.total(
                user_id, mission.week_start, mission.week_end, category.category_id, tracker
            )
        return mission


class GamificationService:
    """Streak, active mission, month prediction and thermometer in one read"""

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], date] = date.today,
        missions: Optional[MissionService] = None,
        streaks: Optional[StreakTracker] = None,
    ):
        self.store = store
        self.clock = clock
        self.budget = BudgetService(store, clock=clock)
        self.missions = missions or MissionService(store, self.budget, clock=clock)
        self.streaks = streaks or StreakTracker(store, self.budget.aggregator, clock=clock)

    def overview(self, user_id: str) -> Dict[str, Any]:
        tracker = ReadTracker(user_id)
        streak = tracker.read("streak", lambda: self.streaks.load(user_id)[1], None)
        mission = self.missions.active(user_id, tracker)

        snapshot = self.budget.snapshot(user_id, include_previous_month=False)
        summary = snapshot.summary
        prediction = predict_run_out(summary.total_budget, snapshot.spend.total, summary.days_elapsed, summary.days_in_month)
        thermometer = budget_thermometer(summary.total_budget, snapshot.spend.total, summary.days_elapsed, summary.days_in_month)

        return {
            "streak": streak,
            "mission": mission,
            "prediction": asdict(prediction),
            "thermometer": asdict(thermometer),
        }
