"""Weekly mission catalogue and baseline tiers"""

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from budget_insights.domain.exceptions import InvalidMissionTypeError
from budget_insights.domain.models import MissionBaseline
from budget_insights.utils.money import round2

NOISE_FLOOR = 10.0
WEEKS_PER_MONTH = 4.3
TRAILING_WINDOW_DAYS = 30
DEFAULT_BASELINE = 50.0
UNRESOLVED_CATEGORY_BASELINE = 100.0
TARGET_REDUCTION_PERCENT = 10


@dataclass(frozen=True)
class MissionType:
    """A kind of weekly challenge tied to one spending category"""

    key: str
    category_name: str


MISSION_TYPES = (
    MissionType("reduce_food", "Groceries"),
    MissionType("reduce_transport", "Transport"),
    MissionType("reduce_entertainment", "Entertainment"),
)


def get_mission_type(key: str) -> MissionType:
    for mission_type in MISSION_TYPES:
        if mission_type.key == key:
            return mission_type
    raise InvalidMissionTypeError(key)


def choose_mission_type(
    requested: Optional[str] = None,
    rng: Optional[random.Random] = None,
    catalogue: Sequence[MissionType] = MISSION_TYPES,
) -> MissionType:
    """Requested type when given, otherwise a random pick from the catalogue"""
    if requested:
        return get_mission_type(requested)
    return (rng or random).choice(list(catalogue))


def resolve_baseline(
    category_name: str,
    last_week_total: Optional[float],
    trailing_total: Optional[float],
) -> MissionBaseline:
    """
    Pick the weekly baseline in three tiers, each must clear the noise floor (10):

    1. last calendar week's spend in the category          -> "last_week"
    2. trailing 30-day spend / 4.3 (weeks per month)       -> "monthly_average"
    3. fixed default: 50, or 100 when the category is unknown -> "default_min"

    Totals are None when the category could not be resolved at all.
    """
    if last_week_total is None and trailing_total is None:
        return MissionBaseline(category_name, UNRESOLVED_CATEGORY_BASELINE, "default_min")

    if last_week_total is not None and last_week_total > NOISE_FLOOR:
        return MissionBaseline(category_name, round2(last_week_total), "last_week")

    weekly_average = (trailing_total or 0.0) / WEEKS_PER_MONTH
    if weekly_average > NOISE_FLOOR:
        return MissionBaseline(category_name, round2(weekly_average), "monthly_average")

    return MissionBaseline(category_name, DEFAULT_BASELINE, "default_min")
