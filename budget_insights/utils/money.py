"""Rounding and currency formatting helpers"""

import math

from budget_insights.config import settings


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero on the positive side (Math.round semantics), not banker's rounding"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round1(value: float) -> float:
    return round_half_up(value, 1)


def round2(value: float) -> float:
    return round_half_up(value, 2)


def format_currency(amount: float, symbol: str | None = None) -> str:
    """€1,234.50 / -€12.00"""
    symbol = settings.currency_symbol if symbol is None else symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
