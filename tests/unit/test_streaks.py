"""Unit tests for the no-spend streak state machine"""

from datetime import date, timedelta
from budget_insights.domain.models import StreakState
from budget_insights.domain.streaks import already_checked_in, apply_check_in

TODAY = date(2026, 10, 20)
YESTERDAY = TODAY - timedelta(days=1)


def test_first_check_in_without_spend_starts_streak():
    state = apply_check_in(None, had_spend_today=False, today=TODAY)

    assert state.current_streak == 1
    assert state.best_streak == 1
    assert state.last_no_spend_date == TODAY
    assert state.streak_broken_count == 0
    assert state.total_no_spend_days == 1


def test_first_check_in_with_spend_is_all_zero():
    state = apply_check_in(None, had_spend_today=True, today=TODAY)

    assert state.current_streak == 0
    assert state.best_streak == 0
    assert state.last_no_spend_date is None
    assert state.streak_broken_count == 0
    assert state.total_no_spend_days == 0


def test_spend_breaks_streak_and_keeps_best():
    prior = StreakState(
        current_streak=5,
        best_streak=7,
        last_no_spend_date=YESTERDAY,
        streak_broken_count=2,
        total_no_spend_days=20,
    )

    state = apply_check_in(prior, had_spend_today=True, today=TODAY)

    assert state.current_streak == 0
    assert state.streak_broken_count == 3
    assert state.best_streak == 7
    assert state.total_no_spend_days == 20
    assert state.last_no_spend_date == YESTERDAY


def test_consecutive_no_spend_day_extends_streak():
    prior = StreakState(current_streak=3, best_streak=3, last_no_spend_date=YESTERDAY, total_no_spend_days=3)

    state = apply_check_in(prior, had_spend_today=False, today=TODAY)

    assert state.current_streak == 4
    assert state.best_streak == 4
    assert state.total_no_spend_days == 4
    assert state.last_no_spend_date == TODAY


def test_gap_restarts_streak_at_one():
    prior = StreakState(current_streak=6, best_streak=9, last_no_spend_date=TODAY - timedelta(days=3), total_no_spend_days=12)

    state = apply_check_in(prior, had_spend_today=False, today=TODAY)

    assert state.current_streak == 1
    assert state.best_streak == 9
    assert state.total_no_spend_days == 13


def test_check_in_twice_same_day_double_counts():
    """The transition itself is not idempotent; the guard lives in the tracker"""
    first = apply_check_in(None, had_spend_today=False, today=TODAY)
    second = apply_check_in(first, had_spend_today=False, today=TODAY)

    assert second.total_no_spend_days == 2
    assert already_checked_in(first, TODAY) is True
    assert already_checked_in(first, TODAY + timedelta(days=1)) is False
    assert already_checked_in(None, TODAY) is False
