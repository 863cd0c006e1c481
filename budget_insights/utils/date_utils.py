"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import Tuple


def days_in_month(day: date) -> int:
    """Number of days in the month containing `day`"""
    return calendar.monthrange(day.year, day.month)[1]


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last day of the month containing `day` (inclusive)"""
    return day.replace(day=1), day.replace(day=days_in_month(day))


def previous_month_bounds(day: date) -> Tuple[date, date]:
    """First and last day of the calendar month before `day`"""
    last = day.replace(day=1) - timedelta(days=1)
    return last.replace(day=1), last


def week_bounds(day: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing `day`"""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def previous_week_bounds(day: date) -> Tuple[date, date]:
    """Monday and Sunday of the calendar week before the one containing `day`"""
    start, _ = week_bounds(day)
    return start - timedelta(days=7), start - timedelta(days=1)
