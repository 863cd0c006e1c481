"""No-spend streak state machine"""

from dataclasses import replace
from datetime import date, timedelta
from typing import Optional

from budget_insights.domain.models import StreakState


def start_streak(had_spend_today: bool, today: date) -> StreakState:
    """First check-in for a user: a streak of 1, or an all-zero state if they already spent"""
    if had_spend_today:
        return StreakState(last_check_in_date=today)

    return StreakState(
        current_streak=1,
        best_streak=1,
        last_no_spend_date=today,
        streak_broken_count=0,
        total_no_spend_days=1,
        last_check_in_date=today,
    )


def apply_check_in(state: Optional[StreakState], had_spend_today: bool, today: date) -> StreakState:
    """
    Advance the streak by one daily check-in.

    - spend today: current streak resets to 0 and the broken counter grows;
      best streak and total no-spend days are untouched
    - no spend, last no-spend day was yesterday: streak continues
    - no spend otherwise: streak restarts at 1

    Calling this twice for the same day counts the day twice; callers that
    need idempotency check `already_checked_in` first.
    """
    if state is None:
        return start_streak(had_spend_today, today)

    if had_spend_today:
        return replace(
            state,
            current_streak=0,
            streak_broken_count=state.streak_broken_count + 1,
            last_check_in_date=today,
        )

    consecutive = state.last_no_spend_date == today - timedelta(days=1)
    current = state.current_streak + 1 if consecutive else 1

    return replace(
        state,
        current_streak=current,
        best_streak=max(state.best_streak, current),
        last_no_spend_date=today,
        total_no_spend_days=state.total_no_spend_days + 1,
        last_check_in_date=today,
    )


def already_checked_in(state: Optional[StreakState], today: date) -> bool:
    return state is not None and state.last_check_in_date == today
