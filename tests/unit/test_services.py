"""Budget, streak, mission and gamification services against the SQLite store"""

import random
import pytest
from datetime import date, timedelta
from budget_insights.domain.exceptions import StoreUnavailableError
from budget_insights.services.budget import BudgetService
from budget_insights.services.gamification import GamificationService, MissionService, StreakTracker

TODAY = date(2026, 10, 20)
USER = "user_1"


class Clock:
    """Mutable clock for multi-day scenarios"""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int = 1):
        self.today += timedelta(days=days)


class DownStore:
    def query(self, *args, **kwargs):
        raise StoreUnavailableError("connection refused")


@pytest.fixture
def month(seed):
    """Groceries over budget, Transport within, nothing last month"""
    groceries = seed.category("Groceries", "fixed", fixed_amount=300)
    transport = seed.category("Transport", "percentage", percentage=10)
    seed.expense(300, date(2026, 10, 2), groceries)
    seed.bank(20, date(2026, 10, 9), groceries)
    seed.expense(50, date(2026, 10, 11), transport)
    return {"groceries": groceries, "transport": transport}


def test_snapshot_uses_default_budget(store, month):
    snapshot = BudgetService(store, clock=lambda: TODAY).snapshot(USER)
    summary = snapshot.summary

    assert summary.total_budget == 2000
    assert summary.total_spent == 370
    assert summary.days_in_month == 31
    assert summary.days_remaining == 11
    # 2000 - 370 / 20 * 31
    assert summary.projected_month_end == 1426.5
    assert summary.percentage_used == 18.5
    assert snapshot.projection.risk_level == "low"
    assert summary.trend.previous_month_spent == 0

    groceries, transport = snapshot.views
    assert groceries.is_over_budget is True
    assert groceries.amount_spent == 320
    assert transport.budget_allocated == 200


def test_snapshot_reads_monthly_budget(store, seed, month):
    seed.budget(1000)

    snapshot = BudgetService(store, clock=lambda: TODAY).snapshot(USER)

    assert snapshot.summary.total_budget == 1000
    assert snapshot.views[1].budget_allocated == 100


def test_snapshot_ignores_inactive_categories(store, month):
    store.update_by_id("category", month["transport"], {"is_active": False})
    store.commit()

    snapshot = BudgetService(store, clock=lambda: TODAY).snapshot(USER)

    assert [v.name for v in snapshot.views] == ["Groceries"]


def test_snapshot_raises_when_store_is_down():
    with pytest.raises(StoreUnavailableError):
        BudgetService(DownStore(), clock=lambda: TODAY).snapshot(USER)


def test_streak_consecutive_days_and_break(store, seed):
    clock = Clock(TODAY)
    tracker = StreakTracker(store, clock=clock)

    assert tracker.check_in(USER).current_streak == 1
    clock.advance()
    assert tracker.check_in(USER).current_streak == 2

    clock.advance()
    seed.expense(9.99, clock.today)
    state = tracker.check_in(USER)

    assert state.current_streak == 0
    assert state.best_streak == 2
    assert state.streak_broken_count == 1
    assert state.total_no_spend_days == 2


def test_streak_same_day_check_in_is_ignored(store):
    tracker = StreakTracker(store, clock=lambda: TODAY, same_day_guard=True)

    tracker.check_in(USER)
    state = tracker.check_in(USER)

    assert state.current_streak == 1
    assert state.total_no_spend_days == 1


def test_streak_same_day_check_in_counts_twice_without_guard(store):
    tracker = StreakTracker(store, clock=lambda: TODAY, same_day_guard=False)

    tracker.check_in(USER)
    state = tracker.check_in(USER)

    assert state.total_no_spend_days == 2
    assert len(store.query("user_streak", {"user_id": USER})) == 1


def test_mission_baseline_from_last_week(store, seed, month):
    seed.expense(25, date(2026, 10, 14), month["groceries"])

    mission = MissionService(store, clock=lambda: TODAY).generate(USER, "reduce_food")

    assert mission.category_name == "Groceries"
    assert mission.week_start == date(2026, 10, 19)
    assert mission.week_end == date(2026, 10, 25)
    assert mission.baseline.baseline_source == "last_week"
    assert mission.baseline.baseline_amount == 25
    assert mission.target_amount == 22.5


def test_mission_baseline_from_thirty_day_average(store, seed):
    groceries = seed.category("Groceries", "fixed", fixed_amount=300)
    seed.expense(8, date(2026, 10, 15), groceries)
    seed.expense(56.5, date(2026, 10, 1), groceries)

    mission = MissionService(store, clock=lambda: TODAY).generate(USER, "reduce_food")

    assert mission.baseline.baseline_source == "monthly_average"
    assert mission.baseline.baseline_amount == 15


def test_mission_for_missing_category_uses_default(store):
    mission = MissionService(store, clock=lambda: TODAY).generate(USER, "reduce_transport")

    assert mission.baseline.baseline_amount == 100
    assert mission.baseline.baseline_source == "default_min"


def test_new_mission_fails_previous_one(store, month):
    service = MissionService(store, clock=lambda: TODAY, rng=random.Random(3))

    first = service.generate(USER, "reduce_food")
    second = service.generate(USER)

    statuses = {row["id"]: row["status"] for row in store.query("weekly_mission", {"user_id": USER})}
    assert statuses[first.mission_id] == "failed"
    assert statuses[second.mission_id] == "active"


def test_active_mission_tracks_this_week(store, seed, month):
    service = MissionService(store, clock=lambda: TODAY)
    service.generate(USER, "reduce_food")
    seed.expense(7, date(2026, 10, 19), month["groceries"])
    seed.bank(5, TODAY, month["groceries"])
    seed.expense(100, TODAY, month["transport"])

    mission = service.active(USER)

    assert mission.current_week_amount == 12


def test_active_mission_keeps_baseline_frozen(store, seed, month):
    """Late-recorded spend for last week does not move this week's target"""
    seed.expense(25, date(2026, 10, 14), month["groceries"])
    service = MissionService(store, clock=lambda: TODAY)
    created = service.generate(USER, "reduce_food")

    seed.expense(400, date(2026, 10, 13), month["groceries"])
    mission = service.active(USER)

    assert mission.baseline == created.baseline
    assert mission.baseline.baseline_amount == 25
    assert mission.target_amount == 22.5


def test_gamification_overview_before_any_activity(store, month):
    overview = GamificationService(store, clock=lambda: TODAY).overview(USER)

    assert overview["streak"] is None
    assert overview["mission"] is None
    assert overview["prediction"]["days_remaining"] == 11
    assert overview["prediction"]["is_on_track"] is True
    # 370 / 2000 = 18.5% used vs 64.5% of the month elapsed
    assert overview["thermometer"]["status"] == "good"
